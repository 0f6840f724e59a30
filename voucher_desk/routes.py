"""
Desk Routes - Student Voucher Desk

Flask endpoints binding the browser page to the search desk, the voucher
renderer and the log client. Voucher and attendance actions always work on
the selection snapshot taken at the moment the request arrives.
"""

import io
import logging

from flask import Blueprint, current_app, jsonify, render_template, request, send_file

from voucher_desk.modules.log_client import EVENT_TYPES

desk_bp = Blueprint('desk', __name__)
logger = logging.getLogger(__name__)


def _components():
    return current_app.extensions['voucher_desk']


def _state_response(state, status_code=200):
    return jsonify({
        'success': True,
        'state': state.to_dict()
    }), status_code


def _no_selection():
    return jsonify({
        'success': False,
        'message': 'No student selected'
    }), 400


@desk_bp.route('/')
def index():
    """Voucher desk page"""
    roster_size = len(_components()['roster_source'].records)
    return render_template('index.html', roster_size=roster_size)


@desk_bp.route('/api/search/state')
def search_state():
    return _state_response(_components()['search_desk'].snapshot())


@desk_bp.route('/api/search/query', methods=['POST'])
def search_query():
    """Store the query and schedule a debounced evaluation"""
    data = request.get_json(silent=True) or {}
    query = data.get('query', '')
    if not isinstance(query, str):
        return jsonify({
            'success': False,
            'message': 'query must be a string'
        }), 400

    return _state_response(_components()['search_desk'].set_query(query), 202)


@desk_bp.route('/api/search/highlight', methods=['POST'])
def search_highlight():
    data = request.get_json(silent=True) or {}
    direction = data.get('direction')
    if direction not in ('up', 'down'):
        return jsonify({
            'success': False,
            'message': "direction must be 'up' or 'down'"
        }), 400

    return _state_response(_components()['search_desk'].move_highlight(direction))


@desk_bp.route('/api/search/confirm', methods=['POST'])
def search_confirm():
    return _state_response(_components()['search_desk'].confirm_highlighted())


@desk_bp.route('/api/search/select', methods=['POST'])
def search_select():
    """Explicitly choose a student, typically from a suggestion click"""
    data = request.get_json(silent=True) or {}
    student_id = data.get('student_id')
    if student_id is None or str(student_id).strip() == '':
        return jsonify({
            'success': False,
            'message': 'No student ID provided'
        }), 400

    record = _components()['roster_source'].find_by_id(student_id)
    if record is None:
        return jsonify({
            'success': False,
            'message': f'Student {student_id} not found'
        }), 404

    return _state_response(_components()['search_desk'].select_explicit(record))


@desk_bp.route('/api/search/clear', methods=['POST'])
def search_clear():
    return _state_response(_components()['search_desk'].clear())


@desk_bp.route('/api/search/dismiss', methods=['POST'])
def search_dismiss():
    return _state_response(_components()['search_desk'].dismiss_suggestions())


def _voucher_response(as_attachment):
    components = _components()
    record = components['search_desk'].selection()
    if record is None:
        return _no_selection()

    result = components['voucher_renderer'].generate_voucher(record)
    if not result['success']:
        return jsonify({
            'success': False,
            'message': 'An error occurred while generating the voucher'
        }), 500

    event_type = EVENT_TYPES['DOWNLOAD'] if as_attachment else EVENT_TYPES['PRINT']
    components['log_client'].post_event_async(event_type, record)

    return send_file(
        io.BytesIO(result['content']),
        mimetype='application/pdf',
        as_attachment=as_attachment,
        download_name=result['filename']
    )


@desk_bp.route('/api/voucher/download')
def voucher_download():
    """Voucher PDF as a file download"""
    return _voucher_response(as_attachment=True)


@desk_bp.route('/api/voucher/print')
def voucher_print():
    """Voucher PDF inline, for the browser print dialog"""
    return _voucher_response(as_attachment=False)


@desk_bp.route('/api/attendance', methods=['POST'])
def mark_attendance():
    """Mark the selected student as present"""
    components = _components()
    record = components['search_desk'].selection()
    if record is None:
        return _no_selection()

    result = components['log_client'].mark_attendance(record)
    if not result['success']:
        return jsonify({
            'success': False,
            'message': f"Could not mark attendance: {result['error']}"
        }), 502

    return jsonify({
        'success': True,
        'message': f"Attendance marked for {record.name or record.id}",
        'data': result['data']
    })


@desk_bp.route('/api/attendance/summary')
def attendance_summary():
    result = _components()['log_client'].fetch_attendance_summary()
    if not result['success']:
        return jsonify({
            'success': False,
            'message': result['error']
        }), 502

    return jsonify({
        'success': True,
        'data': result['data']
    })


@desk_bp.route('/api/logs')
def recent_logs():
    limit = request.args.get('limit', current_app.config['LOG_RECENT_LIMIT'], type=int)
    result = _components()['log_client'].fetch_logs(limit=limit)
    if not result['success']:
        return jsonify({
            'success': False,
            'message': result['error']
        }), 502

    return jsonify({
        'success': True,
        'data': result['data']
    })


@desk_bp.route('/api/roster/reload', methods=['POST'])
def reload_roster():
    """Re-read the roster spreadsheet"""
    result = _components()['roster_source'].load()
    if not result['success']:
        logger.error(f"Roster reload failed: {result['error']}")
        return jsonify({
            'success': False,
            'message': 'Roster could not be loaded'
        }), 500

    return jsonify({
        'success': True,
        'count': result['count']
    })
