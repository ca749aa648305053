from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from apps.projects.models import Project
from apps.tasks.models import Comment, Subtask, Task, TaskPriority, TaskStatus
import random
from datetime import timedelta

User = get_user_model()


class Command(BaseCommand):
    help = 'Seed the database with sample users, projects and boards'

    def add_arguments(self, parser):
        parser.add_argument(
            '--users',
            type=int,
            default=10,
            help='Number of users to create'
        )
        parser.add_argument(
            '--projects',
            type=int,
            default=3,
            help='Number of projects to create'
        )
        parser.add_argument(
            '--tasks',
            type=int,
            default=40,
            help='Number of tasks to create per project'
        )

    def handle(self, *args, **options):
        self.stdout.write('Starting database seeding...')

        with transaction.atomic():
            users = self.create_users(options['users'])
            projects = self.create_projects(users, options['projects'])
            tasks = []
            for project in projects:
                tasks.extend(self.create_tasks(project, options['tasks']))
            self.create_comments(tasks, users)

        self.stdout.write(
            self.style.SUCCESS(
                f'\nSeed data created successfully!\n'
                f'Users: {len(users)}\n'
                f'Projects: {len(projects)}\n'
                f'Tasks: {len(tasks)}\n\n'
                f'Admin user: admin / admin123\n'
                f'Regular users: [username] / password123\n'
            )
        )

    def create_users(self, num_users):
        self.stdout.write('Creating users...')

        FIRST_NAMES = [
            'Alice', 'Bob', 'Charlie', 'Diana', 'Eve', 'Frank', 'Grace', 'Henry',
            'Ivy', 'Jack', 'Kate', 'Liam', 'Mia', 'Noah', 'Olivia', 'Peter',
        ]

        ROLES = [
            'Tech Lead', 'Backend Developer', 'Frontend Developer', 'Designer',
            'Product Manager', 'QA Engineer', 'Data Analyst', 'Support',
        ]

        users = []

        admin, created = User.objects.get_or_create(
            username='admin',
            defaults={
                'email': 'admin@example.com',
                'display_name': 'Admin',
                'role': 'Administrator',
                'is_staff': True,
                'is_superuser': True
            }
        )
        if created:
            admin.set_password('admin123')
            admin.save()
            self.stdout.write(f'Created admin user: {admin.username}')

        users.append(admin)

        for i in range(num_users):
            first_name = FIRST_NAMES[i % len(FIRST_NAMES)]
            username = f"{first_name.lower()}{i}"

            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'email': f"{username}@example.com",
                    'first_name': first_name,
                    'display_name': first_name,
                    'role': random.choice(ROLES),
                }
            )
            if created:
                user.set_password('password123')
                user.save()

            users.append(user)

        return users

    def create_projects(self, users, num_projects):
        self.stdout.write('Creating projects...')

        PROJECT_NAMES = [
            'Website Redesign', 'Mobile App', 'Data Platform', 'Marketing Campaign',
            'Customer Portal', 'Internal Tools',
        ]
        COLORS = ['#6366f1', '#ec4899', '#22c55e', '#f97316', '#06b6d4', '#eab308']

        projects = []
        for i in range(num_projects):
            name = PROJECT_NAMES[i % len(PROJECT_NAMES)]
            project, created = Project.objects.get_or_create(
                name=name,
                defaults={
                    'description': f"Everything for {name.lower()}",
                    'color': COLORS[i % len(COLORS)],
                    'created_by': users[0],
                }
            )
            if created:
                project.members.set(random.sample(users, min(len(users), random.randint(3, 6))))

            projects.append(project)

        return projects

    def create_tasks(self, project, num_tasks):
        self.stdout.write(f'Creating tasks for {project.name}...')

        VERBS = ['Implement', 'Fix', 'Update', 'Design', 'Review', 'Test']
        NOUNS = ['login flow', 'dashboard', 'API endpoint', 'landing page', 'report', 'onboarding']
        LABELS = ['frontend', 'backend', 'bug', 'feature', 'urgent', 'docs']

        members = list(project.members.all())
        # Continue after whatever the board already holds so columns stay dense
        next_order = {
            status: Task.objects.in_column(project.pk, status).count()
            for status in TaskStatus.values
        }

        tasks = []
        for i in range(num_tasks):
            status = random.choice(TaskStatus.values)
            task = Task.objects.create(
                project=project,
                title=f"{random.choice(VERBS)} {random.choice(NOUNS)}",
                description=f"Sample task {i + 1} for {project.name}",
                status=status,
                order=next_order[status],
                priority=random.choice(TaskPriority.values),
                labels=random.sample(LABELS, random.randint(0, 2)),
                deadline=timezone.now() + timedelta(days=random.randint(1, 30)),
                created_by=project.created_by,
            )
            next_order[status] += 1

            if members:
                task.assignees.set(random.sample(members, random.randint(0, min(2, len(members)))))

            for n in range(random.randint(0, 3)):
                Subtask.objects.create(
                    task=task,
                    title=f"Step {n + 1}",
                    completed=status == TaskStatus.DONE or random.random() > 0.5,
                )

            tasks.append(task)

        return tasks

    def create_comments(self, tasks, users):
        self.stdout.write('Creating comments...')

        for task in tasks:
            if random.random() > 0.4:
                for _ in range(random.randint(1, 3)):
                    Comment.objects.create(
                        task=task,
                        user=random.choice(users),
                        text=random.choice([
                            "Working on this task now.",
                            "This looks good, just need to test it.",
                            "Found an issue, need to fix it.",
                            "Need more information about this requirement.",
                            "Great progress on this feature!",
                        ])
                    )
