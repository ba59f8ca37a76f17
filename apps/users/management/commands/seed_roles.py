"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Management command to seed the default module roles:
             an Administrator plus an Officer and an Encoder per module.
-------------------------------------------------------------------------
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.users.models import Role, RoleModule


OFFICER_PERMISSIONS = ['read', 'write', 'approve']
ENCODER_PERMISSIONS = ['read', 'write']

MODULE_TITLES = [
    (RoleModule.PLANNING, 'Planning'),
    (RoleModule.BUDGET, 'Budget'),
    (RoleModule.ACCOUNTING, 'Accounting'),
    (RoleModule.TREASURY, 'Treasury'),
    (RoleModule.HRIS, 'HRIS'),
]


def _standard_roles():
    roles = [
        {
            'name': 'Administrator',
            'module': RoleModule.ADMIN,
            'is_encoder': False,
            'permissions': ['all'],
        },
    ]
    for module, title in MODULE_TITLES:
        roles.append({
            'name': f'{title} Officer',
            'module': module,
            'is_encoder': False,
            'permissions': list(OFFICER_PERMISSIONS),
        })
        roles.append({
            'name': f'{title} Encoder',
            'module': module,
            'is_encoder': True,
            'permissions': list(ENCODER_PERMISSIONS),
        })
    return roles


# Standard role definitions
STANDARD_ROLES = _standard_roles()


class Command(BaseCommand):
    help = 'Seeds the default module roles into the database'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding system roles...')

        created_count = 0
        updated_count = 0

        for role_data in STANDARD_ROLES:
            role, created = Role.objects.update_or_create(
                name=role_data['name'],
                defaults={
                    'module': role_data['module'],
                    'is_encoder': role_data['is_encoder'],
                    'permissions': role_data['permissions'],
                }
            )
            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'  Created: {role.name}'))
            else:
                updated_count += 1
                self.stdout.write(f'  Updated: {role.name}')

        self.stdout.write(
            self.style.SUCCESS(
                f'\nDone! Created: {created_count}, Updated: {updated_count}'
            )
        )
