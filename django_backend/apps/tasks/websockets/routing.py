from django.urls import path
from .consumers import BoardConsumer

websocket_urlpatterns = [
    path("ws/projects/<int:project_id>/board/", BoardConsumer.as_asgi())
]
