"""Create (or reset) the platform admin account.

Running the command again keeps the same user and only resets its password
and admin flags.

Usage:
  python manage.py create_admin --password 'S3cret!'
  DJANGO_ADMIN_PASSWORD='S3cret!' python manage.py create_admin --username ops
"""

import os

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import User


class Command(BaseCommand):
    help = 'Create the admin user, or reset its password when it already exists.'

    def add_arguments(self, parser):
        parser.add_argument('--username', default='admin')
        parser.add_argument('--email', default='admin@linktech.app')
        parser.add_argument('--name', default='مسؤول النظام')
        parser.add_argument(
            '--password',
            default=os.getenv('DJANGO_ADMIN_PASSWORD', ''),
            help='Defaults to the DJANGO_ADMIN_PASSWORD environment variable.',
        )

    def handle(self, *args, **options):
        password = options['password']
        if not password:
            raise CommandError('A password is required (--password or DJANGO_ADMIN_PASSWORD).')

        with transaction.atomic():
            user = User.objects.filter(username=options['username']).first()
            created = user is None
            if created:
                user = User(username=options['username'], email=options['email'], name=options['name'])
            user.role = User.ROLE_ADMIN
            user.is_staff = True
            user.is_superuser = True
            user.set_password(password)
            user.save()

        if created:
            self.stdout.write(self.style.SUCCESS(f'Admin user "{user.username}" created.'))
        else:
            self.stdout.write(self.style.WARNING(f'Admin user "{user.username}" already exists; password updated.'))
