import pytest

from fakes import FakeScheduler
from voucher_desk.modules.roster_source import RosterSource, StudentRecord


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def ayesha():
    return StudentRecord(id=1001, name='Ayesha Khan', serial=1)


@pytest.fixture
def roster(ayesha):
    return [
        ayesha,
        StudentRecord(id=1002, name='Bilal Ahmed', serial=2),
        StudentRecord(id=2001, name='Sara  Khan', serial=3),
        StudentRecord(id='A-77', name=None, serial=4),
        StudentRecord(id=3005, name='Hamza Ali', serial=5),
    ]


@pytest.fixture
def roster_source(roster):
    source = RosterSource()
    source.replace(roster)
    return source
