"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tests for roles and the module access policy.
-------------------------------------------------------------------------
"""
from io import StringIO

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase

from apps.core.exceptions import UnauthorizedRoleException
from apps.core.storage_django import DjangoStorage
from apps.core.storage_memory import MemoryStorage
from apps.users.models import CustomUser, Role, RoleModule
from apps.users.permissions import Actor, authorize, ensure_module_access, resolve_actor


class AuthorizeTestCase(SimpleTestCase):
    """Test cases for the access predicate."""

    def test_role_covers_only_its_module(self):
        role = Role(name='Accountant', module=RoleModule.ACCOUNTING)
        self.assertTrue(authorize(role, RoleModule.ACCOUNTING))
        for module in (RoleModule.PLANNING, RoleModule.BUDGET, RoleModule.TREASURY, RoleModule.HRIS):
            self.assertFalse(authorize(role, module))

    def test_admin_covers_every_module(self):
        role = Role(name='Administrator', module=RoleModule.ADMIN)
        for module in RoleModule.values:
            self.assertTrue(authorize(role, module))
        self.assertTrue(role.covers(RoleModule.TREASURY))

    def test_authorize_matches_role_covers(self):
        """The access predicate and the role agree on every module pair."""
        for role_module in RoleModule.values:
            role = Role(name=f"{role_module} role", module=role_module)
            for module in RoleModule.values:
                self.assertEqual(authorize(role, module), role.covers(module))

    def test_missing_role_is_refused(self):
        self.assertFalse(authorize(None, RoleModule.BUDGET))
        with self.assertRaises(UnauthorizedRoleException) as ctx:
            ensure_module_access(Actor(user_id=5, role=None), RoleModule.BUDGET)
        self.assertEqual(ctx.exception.details['required_module'], RoleModule.BUDGET)
        self.assertIsNone(ctx.exception.details['role_module'])

    def test_has_permission(self):
        role = Role(name='Cashier', module=RoleModule.TREASURY, permissions=['collections.record'])
        self.assertTrue(role.has_permission('collections.record'))
        self.assertFalse(role.has_permission('disbursements.issue'))


class ResolveActorTestCase(SimpleTestCase):
    """Test cases for resolving the acting role from ids."""

    def setUp(self):
        """Set up test data."""
        self.storage = MemoryStorage()
        self.role = self.storage.create(Role, name='Cashier', module=RoleModule.TREASURY)

    def test_resolves_role(self):
        actor = resolve_actor(self.storage, 7, self.role.pk)
        self.assertEqual(actor.user_id, 7)
        self.assertEqual(actor.module, RoleModule.TREASURY)

    def test_unknown_or_missing_role(self):
        with self.assertRaises(UnauthorizedRoleException):
            resolve_actor(self.storage, 7, 99)
        with self.assertRaises(UnauthorizedRoleException):
            resolve_actor(self.storage, 7, None)


class CustomUserTestCase(TestCase):
    """Test cases for users and their roles."""

    def setUp(self):
        """Set up test data."""
        self.budget_role = Role.objects.create(name='Budget Officer', module=RoleModule.BUDGET)
        self.admin_role = Role.objects.create(name='Administrator', module=RoleModule.ADMIN)

    def test_get_modules(self):
        officer = CustomUser.objects.create_user(
            username='budget.officer', password='testpass123', role=self.budget_role
        )
        admin = CustomUser.objects.create_user(
            username='mayor.office', password='testpass123', role=self.admin_role
        )
        nobody = CustomUser.objects.create_user(username='new.hire', password='testpass123')

        self.assertEqual(officer.get_modules(), ['budget'])
        self.assertEqual(
            admin.get_modules(),
            ['planning', 'budget', 'accounting', 'treasury', 'hris']
        )
        self.assertEqual(nobody.get_modules(), [])

    def test_resolve_actor_from_database(self):
        user = CustomUser.objects.create_user(
            username='budget.officer', password='testpass123', role=self.budget_role
        )
        actor = resolve_actor(DjangoStorage(), user.pk, user.role_id)
        self.assertEqual(actor.role, self.budget_role)
        self.assertTrue(authorize(actor.role, RoleModule.BUDGET))


class SeedRolesCommandTestCase(TestCase):
    """Test cases for the seed_roles management command."""

    def test_seeds_admin_and_module_roles(self):
        call_command('seed_roles', stdout=StringIO())

        self.assertEqual(Role.objects.count(), 11)
        admin = Role.objects.get(name='Administrator')
        self.assertEqual(admin.module, RoleModule.ADMIN)
        self.assertEqual(admin.permissions, ['all'])

        for module in (RoleModule.PLANNING, RoleModule.BUDGET, RoleModule.ACCOUNTING,
                       RoleModule.TREASURY, RoleModule.HRIS):
            roles = Role.objects.filter(module=module)
            self.assertEqual(roles.count(), 2)
            encoder = roles.get(is_encoder=True)
            officer = roles.get(is_encoder=False)
            self.assertEqual(encoder.permissions, ['read', 'write'])
            self.assertEqual(officer.permissions, ['read', 'write', 'approve'])
            self.assertTrue(authorize(officer, module))

        self.assertEqual(Role.objects.get(name='Treasury Encoder').module, RoleModule.TREASURY)

    def test_seeding_twice_updates_in_place(self):
        Role.objects.create(name='Budget Officer', module=RoleModule.BUDGET, permissions=['read'])
        out = StringIO()
        call_command('seed_roles', stdout=out)
        call_command('seed_roles', stdout=out)

        self.assertEqual(Role.objects.count(), 11)
        self.assertEqual(
            Role.objects.get(name='Budget Officer').permissions,
            ['read', 'write', 'approve']
        )
        self.assertIn('Created: 0, Updated: 11', out.getvalue())
