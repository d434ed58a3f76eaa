import pytest

from evidence_map.graph_builder import GraphDataError
from evidence_map.scheduler import ManualScheduler
from evidence_map.session import LayoutSession

from factories import connection, element


class RecordingScheduler(ManualScheduler):
    """Manual scheduler that remembers every callback it was started with."""

    def __init__(self):
        super().__init__()
        self.started = []

    def start(self, callback):
        self.started.append(callback)
        super().start(callback)


def make_session(**kwargs):
    scheduler = RecordingScheduler()
    kwargs.setdefault('seed', 13)
    return LayoutSession(scheduler, **kwargs), scheduler


def test_load_warm_starts_and_publishes(chain_data):
    session, scheduler = make_session()
    frames = []
    session.add_listener(frames.append)

    result = session.load(chain_data)

    assert result.dropped_links == 0
    assert session.generation == 1
    assert session.engine.tick_count == 300
    assert len(frames) == 1
    assert {n.id for n in frames[0].nodes} == {'a', 'b', 'c'}
    assert scheduler.active


def test_ticking_stops_once_settled(chain_data):
    session, scheduler = make_session()
    session.load(chain_data)

    ran = scheduler.advance(1000)

    assert ran < 1000
    assert not scheduler.active
    assert not session.engine.active


def test_each_tick_publishes_a_frame(chain_data):
    session, scheduler = make_session(warm_start_ticks=0)
    session.load(chain_data)
    frames = []
    session.add_listener(frames.append)

    scheduler.advance(5)

    assert [f.tick for f in frames] == [1, 2, 3, 4, 5]


def test_reload_invalidates_old_ticks(chain_data):
    session, scheduler = make_session(warm_start_ticks=0)
    session.load(chain_data)
    stale_tick = scheduler.started[-1]

    other = {
        'elements': [element('x'), element('y')],
        'connections': [connection('x', 'y', 'xy')],
    }
    session.load(other)
    ticks = session.engine.tick_count
    stale_tick()

    assert session.generation == 2
    assert session.engine.tick_count == ticks
    assert {n.id for n in session.graph.nodes} == {'x', 'y'}


def test_reload_resets_interaction(chain_data):
    session, _ = make_session(warm_start_ticks=0)
    session.load(chain_data)
    session.interaction.hover_node('b')
    session.interaction.select_link('ab')

    session.load(chain_data)

    assert not session.interaction.state.is_hovering
    assert session.interaction.state.selected_id is None


def test_invalid_data_keeps_current_graph(chain_data):
    session, scheduler = make_session(warm_start_ticks=0)
    session.load(chain_data)

    with pytest.raises(GraphDataError):
        session.load({'elements': 'nope'})

    assert session.generation == 1
    assert session.graph.has_node('a')
    assert scheduler.active


def test_drag_resumes_ticking_and_repaints(chain_data):
    session, scheduler = make_session()
    session.load(chain_data)
    scheduler.advance(1000)
    assert not scheduler.active

    frames = []
    session.add_listener(frames.append)
    session.interaction.drag_start('a')
    session.interaction.drag_move('a', 500, 500)

    assert scheduler.active
    assert frames[-1].node('a').x == 500 and frames[-1].node('a').y == 500

    scheduler.advance(10)
    assert session.engine.position('a') == (500, 500)


def test_hover_publishes_dimmed_frame(chain_data):
    session, _ = make_session()
    session.load(chain_data)
    frames = []
    session.add_listener(frames.append)

    session.interaction.hover_link('ab')

    assert frames[-1].node('c').opacity == pytest.approx(0.1)
    assert frames[-1].link('bc').opacity == pytest.approx(0.1)


def test_close_stops_everything(chain_data):
    session, scheduler = make_session(warm_start_ticks=0)
    session.load(chain_data)
    tick = scheduler.started[-1]
    frames = []
    session.add_listener(frames.append)

    session.close()
    tick()

    assert session.closed
    assert not scheduler.active
    assert frames == []
    with pytest.raises(RuntimeError):
        session.load(chain_data)


def test_remove_listener(chain_data):
    session, scheduler = make_session(warm_start_ticks=0)
    frames = []
    session.add_listener(frames.append)
    session.remove_listener(frames.append)
    session.load(chain_data)
    scheduler.advance(3)

    assert frames == []


def test_reloading_same_data_gives_same_layout(chain_data):
    session, _ = make_session(warm_start_ticks=0)
    session.load(chain_data)
    first = dict(session.engine.snapshot().positions)

    session.load(chain_data)

    assert dict(session.engine.snapshot().positions) == first
    fresh, _ = make_session(warm_start_ticks=0)
    fresh.load(chain_data)
    assert dict(fresh.engine.snapshot().positions) == first
