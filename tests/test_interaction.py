import pytest

from evidence_map import constants
from evidence_map.graph_builder import build_graph
from evidence_map.interaction import HOVER_LINK, HOVER_NODE, InteractionController, InteractionState
from evidence_map.simulation import ForceSimulationEngine

from factories import connection, element


@pytest.fixture
def chain(chain_data):
    graph = build_graph(chain_data).graph
    engine = ForceSimulationEngine(graph, seed=21)
    return graph, engine, InteractionController(graph, engine)


def test_hover_node_activates_whole_neighbourhood(chain):
    _, _, controller = chain
    state = controller.hover_node('b')

    assert state.hovered_kind == HOVER_NODE
    assert state.connected == {'a', 'b', 'c'}
    assert state.active_links == {'ab', 'bc'}
    assert not controller.is_node_dimmed('a')
    assert controller.is_link_active('ab') and controller.is_link_active('bc')


def test_hover_end_node_dims_the_rest(chain):
    _, _, controller = chain
    controller.hover_node('a')

    assert controller.state.connected == {'a', 'b'}
    assert controller.is_node_dimmed('c')
    assert controller.is_link_dimmed('bc')
    assert controller.is_link_active('ab')


def test_hover_link_activates_only_that_link(chain):
    _, _, controller = chain
    state = controller.hover_link('ab')

    assert state.hovered_kind == HOVER_LINK
    assert state.connected == {'a', 'b'}
    assert state.active_links == {'ab'}
    assert controller.is_node_dimmed('c')
    assert controller.is_link_dimmed('bc')


def test_hover_link_ignores_other_links_between_same_nodes():
    data = {
        'elements': [element('a'), element('b')],
        'connections': [connection('a', 'b', 'first'), connection('b', 'a', 'second')],
    }
    graph = build_graph(data).graph
    controller = InteractionController(graph, ForceSimulationEngine(graph, seed=1))
    controller.hover_link('first')

    assert controller.is_link_dimmed('second')


def test_clear_hover_restores_neutral_state(chain):
    _, _, controller = chain
    controller.hover_node('b')
    state = controller.clear_hover()

    assert not state.is_hovering
    assert state.connected == frozenset()
    assert not controller.is_node_dimmed('c')
    assert not controller.is_link_dimmed('bc')
    assert not controller.is_link_active('ab')


def test_unknown_ids_are_ignored(chain):
    _, engine, controller = chain
    before = controller.state

    controller.hover_node('ghost')
    controller.hover_link('ghost')
    controller.select_link('ghost')
    controller.drag_start('ghost')
    controller.drag_move('ghost', 1, 2)
    controller.drag_end('ghost')

    assert controller.state == before
    assert engine.snapshot().pins == frozenset()


def test_select_link_toggles(chain):
    _, _, controller = chain

    assert controller.select_link('ab').selected_id == 'ab'
    assert controller.select_link('bc').selected_id == 'bc'
    assert controller.select_link('bc').selected_id is None
    controller.select_link('ab')
    assert controller.clear_selection().selected_id is None


def test_selection_is_independent_of_hover(chain):
    _, _, controller = chain
    controller.select_link('ab')
    controller.hover_node('c')
    controller.clear_hover()

    assert controller.state.selected_id == 'ab'


def test_drag_scenario(chain):
    _, engine, controller = chain
    while engine.active:
        engine.step()
    start = engine.position('a')

    state = controller.drag_start('a')
    assert state.dragging_id == 'a'
    assert engine.alpha > 0
    assert engine.active
    assert engine.alpha_target == constants.DRAG_ALPHA_TARGET
    assert engine.pin_of('a') == start

    controller.drag_move('a', 500, 500)
    assert engine.position('a') == (500, 500)
    for _ in range(20):
        engine.step()
        assert engine.position('a') == (500, 500)

    controller.drag_end('a')
    assert controller.state.dragging_id is None
    assert engine.pin_of('a') is None
    assert engine.alpha_target == 0

    alphas = [engine.alpha]
    for _ in range(30):
        engine.step()
        alphas.append(engine.alpha)
    assert all(later < earlier for earlier, later in zip(alphas, alphas[1:]))


def test_drag_moves_only_the_dragged_node(chain):
    _, engine, controller = chain
    controller.drag_start('a')
    controller.drag_move('b', 10, 10)

    assert engine.pin_of('b') is None


def test_state_change_callback(chain):
    _, _, controller = chain
    seen = []
    controller.set_on_state_change(seen.append)

    controller.hover_node('b')
    controller.drag_start('c')
    controller.drag_move('c', 1, 1)

    assert len(seen) == 3
    assert all(isinstance(s, InteractionState) for s in seen)
    assert seen[-1].dragging_id == 'c'


def test_rebind_resets_state(chain):
    graph, engine, controller = chain
    controller.hover_node('b')
    controller.select_link('ab')
    controller.drag_start('a')

    state = controller.rebind(graph, engine)

    assert state == InteractionState()
    assert controller.graph is graph
