import pytest

from consul_registration.config import DiscoveryProperties, HeartbeatProperties
from consul_registration.core.context import RuntimeContext
from consul_registration.discover.entities import HttpCheck, TtlCheck
from consul_registration.discover.registration import RegistrationBuilder
from consul_registration.exceptions import InvalidIdentifierError, MissingPortError


def test_build_primary_uses_context_id_name_hostname_and_bound_port(discovery, heartbeat, context):
    builder = RegistrationBuilder(discovery, heartbeat, context)
    descriptor = builder.build_primary()

    assert descriptor.id == "orders-1"
    assert descriptor.name == "orders"
    assert descriptor.address == "host-a"
    assert descriptor.port == 8080
    assert descriptor.tags == ()
    assert isinstance(descriptor.check, HttpCheck)
    assert descriptor.check.url == "http://host-a:8080/health"


def test_build_primary_prefers_configured_instance_id_and_port(heartbeat, context):
    discovery = DiscoveryProperties(
        service_name="my_orders",
        instance_id="orders:blue:7",
        hostname="host-a",
        port=9999,
    )
    descriptor = RegistrationBuilder(discovery, heartbeat, context).build_primary()

    assert descriptor.id == "orders-blue-7"
    assert descriptor.name == "my-orders"
    assert descriptor.port == 9999


def test_prefer_agent_address_leaves_address_unset(heartbeat, context):
    discovery = DiscoveryProperties(service_name="orders", hostname="host-a", prefer_agent_address=True)
    descriptor = RegistrationBuilder(discovery, heartbeat, context).build_primary()

    assert descriptor.address is None
    assert "Address" not in descriptor.to_agent_payload()


def test_context_path_tag_is_appended_after_configured_tags(heartbeat):
    discovery = DiscoveryProperties(service_name="orders", hostname="host-a", tags=["a", "b"])
    context = RuntimeContext(app_name="orders", context_id="orders-1", context_path="/api")
    context.bind_port(8080)

    descriptor = RegistrationBuilder(discovery, heartbeat, context).build_primary()

    assert descriptor.tags == ("a", "b", "contextPath=/api")


@pytest.mark.parametrize("context_path", [None, "", "/", "//"])
def test_root_context_path_adds_no_tag(discovery, heartbeat, context_path):
    context = RuntimeContext(app_name="orders", context_id="orders-1", context_path=context_path)
    context.bind_port(8080)

    descriptor = RegistrationBuilder(discovery, heartbeat, context).build_primary()

    assert descriptor.tags == ()


def test_health_check_disabled_leaves_check_unset(heartbeat, context):
    discovery = DiscoveryProperties(service_name="orders", hostname="host-a", register_health_check=False)
    descriptor = RegistrationBuilder(discovery, heartbeat, context).build_primary()

    assert descriptor.check is None
    assert "Check" not in descriptor.to_agent_payload()


def test_heartbeat_enabled_gives_ttl_check(discovery, context):
    descriptor = RegistrationBuilder(discovery, HeartbeatProperties(enabled=True, ttl="30s"), context).build_primary()

    assert isinstance(descriptor.check, TtlCheck)
    assert descriptor.has_ttl_check
    assert descriptor.to_agent_payload()["Check"] == {"TTL": "30s"}


def test_primary_descriptor_is_built_once(discovery, heartbeat, context):
    builder = RegistrationBuilder(discovery, heartbeat, context)
    assert builder.primary is None

    first = builder.build_primary()
    context.context_path = "/changed"

    assert builder.build_primary() is first
    assert builder.primary is first


def test_missing_port_raises_and_is_not_cached(discovery, heartbeat):
    context = RuntimeContext(app_name="orders", context_id="orders-1")
    builder = RegistrationBuilder(discovery, heartbeat, context)

    with pytest.raises(MissingPortError):
        builder.build_primary()
    assert builder.primary is None

    context.bind_port(8080)
    assert builder.build_primary().port == 8080


def test_invalid_service_name_raises(heartbeat, context):
    discovery = DiscoveryProperties(service_name="9lives", hostname="host-a")

    with pytest.raises(InvalidIdentifierError):
        RegistrationBuilder(discovery, heartbeat, context).build_primary()


def test_split_management_port_moves_primary_check_to_management_port(discovery, heartbeat, context):
    context.bind_management_port(9090)
    builder = RegistrationBuilder(discovery, heartbeat, context)

    primary = builder.build_primary()

    assert builder.should_register_management()
    assert primary.port == 8080
    assert primary.check.url == "http://host-a:9090/health"


def test_build_management_descriptor(heartbeat, context):
    discovery = DiscoveryProperties(
        service_name="orders",
        hostname="host-a",
        management_tags=["mgmt"],
        tags=["primary-only"],
    )
    context.context_path = "/api"
    context.bind_management_port(9090)

    management = RegistrationBuilder(discovery, heartbeat, context).build_management()

    assert management.id == "orders-1-management"
    assert management.name == "orders-management"
    assert management.port == 9090
    assert management.address == "host-a"
    assert management.tags == ("mgmt",)
    assert management.check.url == "http://host-a:9090/health"


def test_management_port_override_and_suffix(heartbeat, context):
    discovery = DiscoveryProperties(
        service_name="orders",
        hostname="host-a",
        management_port=7070,
        management_suffix="admin",
    )
    context.bind_management_port(9090)

    management = RegistrationBuilder(discovery, heartbeat, context).build_management()

    assert management.id == "orders-1-admin"
    assert management.name == "orders-admin"
    assert management.port == 7070


def test_management_always_gets_a_check(heartbeat, context):
    discovery = DiscoveryProperties(service_name="orders", hostname="host-a", register_health_check=False)
    context.bind_management_port(9090)

    management = RegistrationBuilder(discovery, heartbeat, context).build_management()

    assert management.check is not None


def test_management_without_port_raises(discovery, heartbeat, context):
    with pytest.raises(MissingPortError):
        RegistrationBuilder(discovery, heartbeat, context).build_management()


def test_same_management_port_is_not_split(discovery, heartbeat, context):
    context.bind_management_port(8080)

    assert not RegistrationBuilder(discovery, heartbeat, context).should_register_management()
