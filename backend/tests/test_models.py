import pytest

from uno_server.errors import InvalidRequest
from uno_server.models import Card, CardKind, Color, Player, parse_color


def test_card_wire_format_matches_client_protocol():
    assert Card.number(Color.RED, 7).to_dict() == {'color': 'red', 'type': 'number', 'value': 7}
    assert Card.action(Color.BLUE, CardKind.DRAW_TWO).to_dict() == {'color': 'blue', 'type': 'action', 'value': 'draw2'}
    assert Card.wild(draw_four=True).to_dict() == {'color': 'wild', 'type': 'wild', 'value': 'draw4'}


def test_from_dict_parses_client_cards():
    assert Card.from_dict({'color': 'green', 'type': 'number', 'value': 0}) == Card.number(Color.GREEN, 0)
    assert Card.from_dict({'color': 'yellow', 'type': 'action', 'value': 'skip'}) == Card.action(Color.YELLOW, CardKind.SKIP)
    assert Card.from_dict({'color': 'wild', 'type': 'wild', 'value': 'wild'}) == Card.wild()
    # numbers may arrive as strings
    assert Card.from_dict({'color': 'red', 'value': '4'}) == Card.number(Color.RED, 4)


@pytest.mark.parametrize('payload', [
    None,
    'red 5',
    {'color': 'purple', 'value': 3},
    {'color': 'red', 'value': 12},
    {'color': 'red', 'value': 'draw4'},
    {'color': 'wild', 'value': 'skip'},
    {'color': 'red', 'value': True},
])
def test_from_dict_rejects_malformed_cards(payload):
    with pytest.raises(InvalidRequest):
        Card.from_dict(payload)


def test_cards_compare_by_value_not_identity():
    a = Card.number(Color.RED, 5)
    b = Card.from_dict({'color': 'red', 'type': 'number', 'value': 5})
    assert a == b and a is not b
    assert Card.number(Color.RED, 5) != Card.number(Color.BLUE, 5)


def test_face_matches_numbers_and_actions():
    assert Card.number(Color.RED, 5).face == Card.number(Color.BLUE, 5).face
    assert Card.action(Color.RED, CardKind.SKIP).face == Card.action(Color.GREEN, CardKind.SKIP).face
    assert Card.number(Color.RED, 2).face != Card.action(Color.RED, CardKind.DRAW_TWO).face


def test_parse_color_requires_a_real_color():
    assert parse_color('Blue') == Color.BLUE
    assert parse_color(Color.GREEN) == Color.GREEN
    for bad in (None, 'wild', 'pink'):
        with pytest.raises(InvalidRequest):
            parse_color(bad)


def test_player_public_dict_hides_hand():
    player = Player(id='s1', name='Ann', hand=[Card.number(Color.RED, 1), Card.wild()])
    data = player.to_dict(host_id='s1')
    assert data == {'id': 's1', 'name': 'Ann', 'handSize': 2, 'unoCall': False, 'ready': False, 'isHost': True}
    assert 'hand' not in data


def test_remove_card_drops_one_copy():
    red5 = Card.number(Color.RED, 5)
    player = Player(id='s1', name='Ann', hand=[red5, Card.number(Color.RED, 5)])
    player.remove_card(red5)
    assert player.hand == [red5]
