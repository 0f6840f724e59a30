import math
import threading

import pandas as pd

from voucher_desk.modules.roster_source import RosterSource, StudentRecord


def write_roster(path, rows):
    pd.DataFrame(rows).to_excel(path, index=False)
    return path


def test_load_reads_first_sheet(tmp_path):
    path = write_roster(tmp_path / 'students.xlsx', [
        {'SNo': 1, 'StudentId': 1001, 'Student Name': 'Ayesha Khan'},
        {'SNo': 2, 'StudentId': 1002, 'Student Name': 'Bilal Ahmed'},
    ])
    source = RosterSource(path)

    result = source.load()

    assert result['success'] is True
    assert result['count'] == 2
    assert source.records[0] == StudentRecord(id=1001, name='Ayesha Khan', serial=1)


def test_blank_cells_become_none(tmp_path):
    path = write_roster(tmp_path / 'students.xlsx', [
        {'SNo': 1, 'StudentId': 1001, 'Student Name': 'Ayesha Khan'},
        {'SNo': 2, 'StudentId': 1002, 'Student Name': None},
    ])
    source = RosterSource(path)

    source.load()

    missing_name = source.records[1]
    assert missing_name.name is None
    assert missing_name.id == 1002
    assert isinstance(missing_name.id, int)


def test_records_from_frame_handles_nan_and_floats():
    frame = pd.DataFrame({
        'StudentId': [1001.0, float('nan')],
        'Student Name': ['  Ayesha Khan ', 'Ghost'],
        'SNo': [1.0, 2.5],
    })

    records = RosterSource().records_from_frame(frame)

    assert records[0] == StudentRecord(id=1001, name='Ayesha Khan', serial=1)
    assert records[1].id is None
    assert math.isclose(records[1].serial, 2.5)


def test_missing_columns_yield_none_fields():
    frame = pd.DataFrame({'StudentId': [7]})

    records = RosterSource().records_from_frame(frame)

    assert records == [StudentRecord(id=7, name=None, serial=None)]


def test_numeric_names_are_text():
    frame = pd.DataFrame({'StudentId': [7], 'Student Name': [12345], 'SNo': [1]})

    records = RosterSource().records_from_frame(frame)

    assert records[0].name == '12345'


def test_custom_column_names(tmp_path):
    path = write_roster(tmp_path / 'students.xlsx', [{'ID': 'X1', 'Name': 'Zara', 'Serial': 'S9'}])
    source = RosterSource(path, id_column='ID', name_column='Name', serial_column='Serial')

    source.load()

    assert source.records == (StudentRecord(id='X1', name='Zara', serial='S9'),)


def test_failed_load_keeps_previous_roster(tmp_path):
    source = RosterSource(tmp_path / 'missing.xlsx')
    previous = [StudentRecord(id=1, name='Kept', serial=1)]
    source.replace(previous)

    result = source.load()

    assert result['success'] is False
    assert 'error' in result
    assert list(source.records) == previous


def test_load_without_path():
    result = RosterSource().load()

    assert result == {'success': False, 'error': 'No roster path configured'}


def test_subscribers_notified_on_replace():
    source = RosterSource()
    received = []
    unsubscribe = source.subscribe(received.append)

    source.replace([StudentRecord(id=1, name='A', serial=1)])
    unsubscribe()
    source.replace([])

    assert received == [(StudentRecord(id=1, name='A', serial=1),)]


def test_failing_subscriber_does_not_block_others():
    source = RosterSource()
    received = []

    def broken(records):
        raise RuntimeError('boom')

    source.subscribe(broken)
    source.subscribe(received.append)
    source.replace([StudentRecord(id=1, name='A', serial=1)])

    assert len(received) == 1


def test_find_by_id_compares_string_forms(roster_source, roster):
    assert roster_source.find_by_id('1001') == roster[0]
    assert roster_source.find_by_id(2001) == roster[2]
    assert roster_source.find_by_id(' A-77 ') == roster[3]
    assert roster_source.find_by_id('9999') is None


def test_concurrent_replacements_notify_in_swap_order():
    source = RosterSource()
    first = [StudentRecord(id=1, name='A', serial=1)]
    second = [StudentRecord(id=2, name='B', serial=2)]
    delivered = []
    first_entered = threading.Event()
    release = threading.Event()

    def slow_subscriber(records):
        delivered.append(records)
        if len(delivered) == 1:
            first_entered.set()
            release.wait(2)

    source.subscribe(slow_subscriber)
    t1 = threading.Thread(target=source.replace, args=(first,))
    t1.start()
    assert first_entered.wait(2)

    t2 = threading.Thread(target=source.replace, args=(second,))
    t2.start()
    t2.join(0.1)
    assert delivered == [tuple(first)]

    release.set()
    t1.join(2)
    t2.join(2)

    assert delivered == [tuple(first), tuple(second)]
    assert source.records == tuple(second)
