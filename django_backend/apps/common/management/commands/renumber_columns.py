from django.core.management.base import BaseCommand, CommandError

from apps.projects.models import Project
from apps.tasks.consistency import drifted_columns, renumber_column, renumber_project


class Command(BaseCommand):
    help = 'Rewrite board columns to dense 0..N-1 orders, keeping their display order'

    def add_arguments(self, parser):
        parser.add_argument(
            '--project',
            type=int,
            help='Renumber every column of this project only'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List drifted columns without changing them'
        )

    def handle(self, *args, **options):
        project_id = options['project']

        if project_id is not None:
            if not Project.objects.filter(pk=project_id).exists():
                raise CommandError(f'Project {project_id} does not exist')
            if options['dry_run']:
                columns = [c for c in drifted_columns() if c[0] == project_id]
                self.report(columns)
                return
            changed = renumber_project(project_id)
            for status, count in changed.items():
                self.stdout.write(f'{status}: {count} task(s) renumbered')
            return

        columns = drifted_columns()
        if options['dry_run']:
            self.report(columns)
            return

        for pid, status in columns:
            count = renumber_column(pid, status)
            self.stdout.write(f'project {pid} {status}: {count} task(s) renumbered')

        self.stdout.write(self.style.SUCCESS(f'Repaired {len(columns)} column(s)'))

    def report(self, columns):
        if not columns:
            self.stdout.write(self.style.SUCCESS('No drifted columns'))
            return
        for pid, status in columns:
            self.stdout.write(f'project {pid} {status}: drifted')
