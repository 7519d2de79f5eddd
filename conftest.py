import pytest

from skit_engine.models import Participant, Stat, StationStat, WorldState


@pytest.fixture
def elena() -> Participant:
    return Participant(
        id="p-elena",
        name="Elena Vasquez",
        stats={Stat.BRAWN: 4, Stat.SKILL: 8, Stat.CHARM: 6, Stat.TRUST: 5},
        location_id="medbay",
    )


@pytest.fixture
def guard() -> Participant:
    return Participant(
        id="p-guard",
        name="Guard",
        stats={Stat.BRAWN: 8, Stat.NERVE: 7, Stat.CHARM: 2},
        location_id="airlock",
    )


@pytest.fixture
def envoy() -> Participant:
    """Off-station; never present and never counts toward fulfilment."""
    return Participant(
        id="p-envoy",
        name="Jane Doe",
        stats={Stat.BRAWN: 10, Stat.CHARM: 10},
        remote=True,
        location_id="medbay",
    )


@pytest.fixture
def world(elena: Participant, guard: Participant, envoy: Participant) -> WorldState:
    return WorldState(
        participants={p.id: p for p in (elena, guard, envoy)},
        station_stats={
            StationStat.SYSTEMS: 5,
            StationStat.COMFORT: 3,
            StationStat.PROVISION: 2,
            StationStat.SECURITY: 6,
            StationStat.HARMONY: 4,
            StationStat.WEALTH: 1,
        },
    )
