"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between layers
within the IAM bounded context and the shared kernel.
"""

from pytest_archon import archrule


class TestIAMDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_infrastructure(self):
        """Domain layer should not depend on infrastructure.

        Roles and statuses are plain vocabulary and should not know about
        SQLAlchemy models or the relationship store client.
        """
        (
            archrule("domain_no_infrastructure")
            .match("iam.domain*")
            .should_not_import("iam.infrastructure*", "infrastructure*")
            .check("iam")
        )

    def test_domain_does_not_import_application(self):
        """Domain layer should not depend on application layer."""
        (
            archrule("domain_no_application")
            .match("iam.domain*")
            .should_not_import("iam.application*")
            .check("iam")
        )

    def test_domain_does_not_import_frameworks(self):
        """Domain objects should be framework-agnostic."""
        (
            archrule("domain_no_frameworks")
            .match("iam.domain*")
            .should_not_import("fastapi*", "starlette*", "sqlalchemy*")
            .check("iam")
        )


class TestIAMPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_does_not_import_infrastructure(self):
        """Ports should not depend on infrastructure implementations.

        The state reader port should not know about RelationalStateReader.
        """
        (
            archrule("ports_no_infrastructure")
            .match("iam.ports*")
            .should_not_import("iam.infrastructure*", "sqlalchemy*")
            .check("iam")
        )

    def test_ports_does_not_import_application(self):
        """Ports are interfaces for the application layer to use."""
        (
            archrule("ports_no_application")
            .match("iam.ports*")
            .should_not_import("iam.application*")
            .check("iam")
        )


class TestIAMApplicationLayerBoundaries:
    """Tests that the application layer stays behind ports."""

    def test_application_does_not_import_infrastructure(self):
        """Application services depend on ports, not implementations."""
        (
            archrule("application_no_infrastructure")
            .match("iam.application*")
            .should_not_import(
                "iam.infrastructure*",
                "shared_kernel.authorization.spicedb*",
            )
            .check("iam")
        )

    def test_application_does_not_import_web_or_orm(self):
        """Services should run the same from the API and the CLI."""
        (
            archrule("application_no_web_or_orm")
            .match("iam.application*")
            .should_not_import("fastapi*", "starlette*", "sqlalchemy*")
            .check("iam")
        )


class TestIAMInfrastructureLayerBoundaries:
    """Tests that infrastructure does not reach into application services."""

    def test_infrastructure_does_not_import_application(self):
        """Readers feed the application layer, not the other way around."""
        (
            archrule("infrastructure_no_application")
            .match("iam.infrastructure*")
            .should_not_import("iam.application*", "iam.presentation*")
            .check("iam")
        )


class TestSharedKernelBoundaries:
    """Tests that the shared kernel does not depend on bounded contexts."""

    def test_shared_kernel_does_not_import_iam(self):
        """Shared kernel is used by contexts and must not import them."""
        (
            archrule("shared_kernel_no_iam")
            .match("shared_kernel*")
            .should_not_import("iam*", "infrastructure*", "main")
            .check("shared_kernel")
        )

    def test_authorization_client_is_framework_agnostic(self):
        """The authorization client should not depend on FastAPI."""
        (
            archrule("authorization_no_fastapi")
            .match("shared_kernel.authorization*")
            .should_not_import("fastapi*", "starlette*")
            .check("shared_kernel")
        )


class TestInfrastructureBoundaries:
    def test_infrastructure_does_not_import_iam(self):
        """Platform wiring should not depend on bounded contexts."""
        (
            archrule("infrastructure_no_iam")
            .match("infrastructure*")
            .should_not_import("iam*")
            .check("infrastructure")
        )
