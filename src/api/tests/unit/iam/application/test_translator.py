"""Unit tests for SyncOperationTranslator."""

import pytest

from iam.application.translator import SyncOperationTranslator
from iam.application.value_objects import SyncAction
from iam.domain.value_objects import TenantRole


@pytest.fixture
def translator() -> SyncOperationTranslator:
    return SyncOperationTranslator()


def _rendered(operation) -> list[str]:
    return [str(r) for r in operation.relationships]


class TestTenantCreated:
    def test_system_link_precedes_owner(self, translator):
        operation = translator.tenant_created("t1", "u1")

        assert operation.name == "sync_tenant_creation"
        assert operation.action is SyncAction.WRITE
        assert _rendered(operation) == [
            "tenant:t1#system@system:main",
            "tenant:t1#owner@user:u1",
        ]
        assert operation.context == {"tenant_id": "t1", "owner_id": "u1"}

    def test_without_owner(self, translator):
        operation = translator.tenant_created("t1", None)

        assert _rendered(operation) == ["tenant:t1#system@system:main"]
        assert "owner_id" not in operation.context


class TestMemberships:
    @pytest.mark.parametrize(
        "role, relation",
        [
            (TenantRole.OWNER, "owner"),
            (TenantRole.ADMIN, "admin"),
            (TenantRole.MEMBER, "member"),
            (TenantRole.VIEWER, "member"),
        ],
    )
    def test_role_maps_to_relation(self, translator, role, relation):
        operation = translator.user_joined_tenant("t1", "u1", role)

        assert _rendered(operation) == [f"tenant:t1#{relation}@user:u1"]
        assert operation.action is SyncAction.WRITE

    def test_user_left_tenant_deletes(self, translator):
        operation = translator.user_left_tenant("t1", "u1", TenantRole.ADMIN)

        assert operation.name == "sync_user_tenant_removal"
        assert operation.action is SyncAction.DELETE
        assert _rendered(operation) == ["tenant:t1#admin@user:u1"]


class TestSitesAndDevices:
    def test_site_created(self, translator):
        operation = translator.site_created("s1", "t1")

        assert _rendered(operation) == ["site:s1#tenant@tenant:t1"]

    def test_site_created_with_manager(self, translator):
        operation = translator.site_created("s1", "t1", manager_id="u9")

        assert _rendered(operation) == [
            "site:s1#tenant@tenant:t1",
            "site:s1#manager@user:u9",
        ]
        assert operation.context["manager_id"] == "u9"

    def test_device_created(self, translator):
        operation = translator.device_created("d1", "s1")

        assert operation.name == "sync_device_creation"
        assert _rendered(operation) == ["device:d1#site@site:s1"]


def test_system_admin_granted(translator):
    operation = translator.system_admin_granted("root")

    assert operation.name == "sync_system_admin"
    assert _rendered(operation) == ["system:main#admin@user:root"]
