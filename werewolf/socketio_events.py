from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from pydantic import ValidationError

from werewolf import socketio
from werewolf.errors import GameError
from werewolf.schemas import (
    CreateRoomPayload,
    JoinRoomPayload,
    ReconnectPayload,
    RoomCodePayload,
    SubmitVotePayload,
)


def _registry():
    return current_app.extensions['werewolf']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _parse(schema, data, fail_event: str):
    """Validate an inbound payload; on failure answer the sender and return None."""
    try:
        return schema.model_validate(data or {})
    except ValidationError as exc:
        current_app.logger.warning(f"[bad-payload] event={fail_event} errors={exc.error_count()}")
        emit(fail_event, {'message': 'Invalid request'})
        return None


def _left_room(old_code, old_session):
    """The connection moved on from ``old_code``; stop its broadcasts and tell the rest."""
    leave_room(old_code)
    if old_session:
        emit('room-updated', old_session.public_state(), to=old_code, include_self=False)


def handle_connect():
    emit('connected', {'message': 'Connected to werewolf server'})


def handle_disconnect(reason=None):
    code, session = _registry().disconnect(_get_sid())
    if session:
        # Others in the room see the player go offline
        emit('room-updated', session.public_state(), to=code, include_self=False)


def handle_create_room(data):
    payload = _parse(CreateRoomPayload, data, 'error')
    if not payload:
        return
    code = _registry().create_room(
        payload.user_name, payload.game_settings.to_settings(), sid=_get_sid(), on_leave=_left_room,
    )
    join_room(code)
    emit('room-created', {'roomCode': code})


def handle_join_room(data):
    payload = _parse(JoinRoomPayload, data, 'join-room-failed')
    if not payload:
        return
    try:
        session = _registry().join_room(payload.user_name, payload.room_code, sid=_get_sid(), on_leave=_left_room)
    except GameError as exc:
        emit('join-room-failed', {'message': exc.message})
        return
    join_room(payload.room_code)
    emit('room-joined', {'roomCode': payload.room_code})
    emit('room-updated', session.public_state(), to=payload.room_code, include_self=False)


def handle_reconnect(data):
    payload = _parse(ReconnectPayload, data, 'reconnection-failed')
    if not payload:
        return
    try:
        session, state = _registry().reconnect(payload.user_name, payload.room_code, sid=_get_sid(), on_leave=_left_room)
    except GameError as exc:
        emit('reconnection-failed', {'message': exc.message})
        return
    join_room(payload.room_code)
    emit('reconnection-success', state)
    emit('room-updated', session.public_state(), to=payload.room_code, include_self=False)
    current_app.logger.info(f"[reconnect] room={payload.room_code} player={payload.user_name}")


def handle_get_room_info(data):
    payload = _parse(RoomCodePayload, data, 'get-room-info-failed')
    if not payload:
        return
    try:
        info = _registry().room_info(payload.room_code, _get_sid())
    except GameError as exc:
        emit('get-room-info-failed', {'message': exc.message})
        return
    emit('get-room-info-success', info)


def handle_start_game(data):
    payload = _parse(RoomCodePayload, data, 'start-game-failed')
    if not payload:
        return
    try:
        _registry().start_game(payload.room_code, _get_sid())
    except GameError as exc:
        emit('start-game-failed', {'message': exc.message})
        return
    emit('start-game-success', {
        'message': 'Game started successfully',
        'roomCode': payload.room_code,
    }, to=payload.room_code)
    current_app.logger.info(f"[start-game] room={payload.room_code}")


def handle_submit_vote(data):
    payload = _parse(SubmitVotePayload, data, 'vote-failed')
    if not payload:
        return
    try:
        _registry().submit_vote(
            payload.room_code,
            payload.current_player_id,
            payload.current_player_role,
            payload.target_player_id,
        )
    except GameError as exc:
        emit('vote-failed', {'message': exc.message})


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create-room', handle_create_room, namespace=namespace)
    socketio.on_event('join-room', handle_join_room, namespace=namespace)
    socketio.on_event('reconnect-to-room', handle_reconnect, namespace=namespace)
    socketio.on_event('get-room-info', handle_get_room_info, namespace=namespace)
    socketio.on_event('start-game', handle_start_game, namespace=namespace)
    socketio.on_event('submit-vote', handle_submit_vote, namespace=namespace)
