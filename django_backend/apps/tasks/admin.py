from django.contrib import admin

from .models import Comment, Subtask, Task


class SubtaskInline(admin.TabularInline):
    model = Subtask
    extra = 0


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ["title", "project", "status", "order", "priority", "deadline"]
    list_filter = ["status", "priority", "project"]
    search_fields = ["title", "description"]
    # Column positions are only changed through the reorder engine
    readonly_fields = ["order", "created_at", "updated_at"]
    filter_horizontal = ["assignees"]
    inlines = [SubtaskInline]


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ["task", "user", "created_at"]
    search_fields = ["text"]
