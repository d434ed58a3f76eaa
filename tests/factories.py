"""Builders for raw map data used across the tests."""


def element(element_id, label=None, element_type=None):
    attrs = {'label': label or element_id.upper()}
    if element_type is not None:
        attrs['element type'] = element_type
    return {'id': element_id, 'attributes': attrs}


def connection(source, target, connection_id=None, connection_type=None, **attrs):
    conn = {'from': source, 'to': target, 'attributes': dict(attrs)}
    if connection_id is not None:
        conn['id'] = connection_id
    if connection_type is not None:
        conn['attributes']['connection type'] = connection_type
    return conn


