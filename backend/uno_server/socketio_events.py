from typing import Iterable

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from uno_server import socketio
from uno_server.commands import COMMANDS, Action, CommandDispatcher, Membership


def deliver(outbound: Iterable[Action], namespace: str = '/') -> None:
    """Send dispatcher output. Works inside handlers and from background timers.

    Membership changes only come from commands, so they always run inside a
    handler with an app context.
    """
    for item in outbound:
        if isinstance(item, Membership):
            if item.join:
                join_room(item.room, sid=item.sid, namespace=namespace)
            else:
                leave_room(item.room, sid=item.sid, namespace=namespace)
            continue
        socketio.emit(item.event, item.payload, to=item.to, skip_sid=item.skip_sid, namespace=namespace)


def run_command(dispatcher: CommandDispatcher, sid: str, command: str, data=None, namespace: str = '/') -> None:
    # Emits go out before the lock is released so broadcasts follow command order
    with dispatcher.registry.lock:
        deliver(dispatcher.dispatch(sid, command, data), namespace=namespace)


def _dispatch(command: str, data=None) -> None:
    run_command(current_app.extensions['uno_dispatcher'], _get_sid(), command, data,
                namespace=request.namespace)


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect():
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(reason=None):
    current_app.logger.info(f"[socket-disconnect] sid={_get_sid()} reason={reason}")
    _dispatch('disconnect')


def _make_handler(command: str):
    def _handler(data=None):
        _dispatch(command, data)
    _handler.__name__ = f"handle_{COMMANDS[command]}"
    return _handler


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers for every inbound game command."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for command in COMMANDS:
        if command == 'disconnect':
            continue
        socketio.on_event(command, _make_handler(command), namespace=namespace)
