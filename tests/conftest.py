"""Shared sample configurations."""
import pytest

ROUTER_A = """\
system {
    host-name router-a;
}
interfaces {
    ge-0/0/0 {
        description uplink;
        unit 0 {
            family inet;
        }
    }
    ge-0/0/1 {
        description "customer port";
        unit 100 {
            family inet {
                address 10.0.0.1/30;
            }
        }
    }
}
protocols {
    ospf {
        area 0.0.0.0 {
            interface ge-0/0/1.100;
        }
    }
}
"""

ROUTER_B = """\
system {
    host-name router-b;
}
interfaces {
    ge-0/0/0 {
        description uplink;
        unit 0 {
            family inet;
        }
    }
    ge-0/0/2 {
        description "customer port b";
        unit 100 {
            family inet {
                address 10.0.0.5/30;
            }
        }
    }
}
protocols {
    ospf {
        area 0.0.0.0 {
            interface ge-0/0/2.100;
        }
    }
}
"""


@pytest.fixture
def router_a() -> str:
    return ROUTER_A


@pytest.fixture
def router_b() -> str:
    return ROUTER_B
