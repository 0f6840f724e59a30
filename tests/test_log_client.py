import requests

from voucher_desk.modules.log_client import EVENT_TYPES, LogClient

from fakes import FakeResponse, FakeSession


def make_client(session, base_url='https://logs.example.org/api/'):
    return LogClient(base_url, api_key='secret', timeout=3, session=session)


def test_post_event_sends_student_payload(ayesha):
    session = FakeSession([FakeResponse(201, {'id': 'evt-1'})])
    client = make_client(session)

    result = client.post_event(EVENT_TYPES['PRINT'], ayesha)

    assert result == {'success': True, 'data': {'id': 'evt-1'}}
    call = session.calls[0]
    assert call['method'] == 'POST'
    assert call['url'] == 'https://logs.example.org/api/logs'
    assert call['timeout'] == 3
    assert call['json']['event'] == 'voucher_print'
    assert call['json']['student_id'] == '1001'
    assert call['json']['student_name'] == 'Ayesha Khan'
    assert call['json']['serial'] == '1'
    assert call['json']['created_at'].endswith('+00:00')
    client.shutdown()


def test_api_key_sent_as_bearer_token():
    session = FakeSession()
    client = make_client(session)

    assert session.headers['Authorization'] == 'Bearer secret'
    client.shutdown()


def test_http_error_reported_not_raised(ayesha):
    session = FakeSession([FakeResponse(503)])
    client = make_client(session)

    result = client.mark_attendance(ayesha)

    assert result['success'] is False
    assert '503' in result['error']
    client.shutdown()


def test_network_error_reported_not_raised():
    session = FakeSession([requests.exceptions.ConnectionError('connection refused')])
    client = make_client(session)

    result = client.fetch_attendance_summary()

    assert result['success'] is False
    assert 'connection refused' in result['error']
    client.shutdown()


def test_fetch_logs_passes_limit():
    session = FakeSession([FakeResponse(200, [{'event': 'attendance'}])])
    client = make_client(session)

    result = client.fetch_logs(limit=5)

    assert result['data'] == [{'event': 'attendance'}]
    assert session.calls[0]['params'] == {'limit': 5}
    assert session.calls[0]['method'] == 'GET'
    client.shutdown()


def test_empty_body_gives_none_data(ayesha):
    session = FakeSession([FakeResponse(204)])
    client = make_client(session)

    assert client.post_event(EVENT_TYPES['DOWNLOAD'], ayesha) == {'success': True, 'data': None}
    client.shutdown()


def test_async_events_are_sent_by_worker(ayesha):
    session = FakeSession()
    client = make_client(session)

    assert client.post_event_async(EVENT_TYPES['DOWNLOAD'], ayesha) is True
    client.flush()

    assert session.calls[0]['json']['event'] == 'voucher_download'
    client.shutdown()
    assert session.closed is True


def test_disabled_client_does_not_send(ayesha):
    session = FakeSession()
    client = LogClient(None, session=session)

    assert client.enabled is False
    assert client.mark_attendance(ayesha) == {'success': False, 'error': 'Log API not configured'}
    assert client.post_event_async(EVENT_TYPES['PRINT'], ayesha) is False
    assert session.calls == []
    client.shutdown()
