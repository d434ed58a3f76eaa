import pytest

from factories import connection, element


@pytest.fixture
def chain_data():
    """A - B - C chain with two links."""
    return {
        'elements': [element('a', 'A'), element('b', 'B', 'Core Story'), element('c', 'C')],
        'connections': [
            connection('a', 'b', 'ab', '++'),
            connection('b', 'c', 'bc', label='influences'),
        ],
    }
