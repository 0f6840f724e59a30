# Student Voucher Desk - Modules Package
"""
Core modules for the Student Voucher Desk.
Contains the roster, search, voucher and logging functionality.
"""

__version__ = "1.0.0"
__description__ = "Core modules for voucher desk functionality"

# Module descriptions
MODULES = {
    'roster_source': 'Roster spreadsheet loading and update notification',
    'search_engine': 'Debounced student search and selection state',
    'search_desk': 'Event-loop host for the search engine',
    'voucher_renderer': 'Thermal voucher PDF rendering',
    'qr_generator': 'Voucher QR token generation',
    'log_client': 'Remote attendance and event logging'
}


def get_module_info():
    """Get information about available modules"""
    return MODULES
