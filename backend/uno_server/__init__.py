from functools import partial

from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def get_registry():
    return current_app.extensions['uno_rooms']


def create_app(config_class=Config, scheduler=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from uno_server.main import main
    flask_app.register_blueprint(main)

    from uno_server.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # One registry per app; the dispatcher is the only thing that mutates it
    from uno_server.commands import CommandDispatcher
    from uno_server.services.games import BackgroundScheduler, RoomRegistry
    from uno_server.socketio_events import deliver, register_socketio_handlers

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    registry = RoomRegistry.from_config(
        flask_app.config,
        scheduler or BackgroundScheduler(socketio),
        logger=flask_app.logger,
    )
    registry.publisher = partial(deliver, namespace=namespace)
    flask_app.extensions['uno_rooms'] = registry
    flask_app.extensions['uno_dispatcher'] = CommandDispatcher(registry, logger=flask_app.logger)

    register_socketio_handlers(namespace=namespace)

    @click.command('uno-simulate')
    @click.option('--players', default=4, show_default=True, help='Bots per game.')
    @click.option('--games', 'game_count', default=1, show_default=True, help='Games to play.')
    @click.option('--seed', type=int, default=None, help='Seed for reproducible deals.')
    def simulate_command(players, game_count, seed):
        """Plays bot games on the rules engine and prints the results."""
        from uno_server.services.games.simulate import simulate_game
        if not 2 <= players <= 10:
            raise click.BadParameter('players must be between 2 and 10', param_hint='--players')
        for i in range(game_count):
            game_seed = None if seed is None else seed + i
            result = simulate_game(players, seed=game_seed)
            if result.finished:
                click.echo(f"Game {i + 1}: {result.winner_name} won after {result.turns} turns")
            else:
                click.echo(f"Game {i + 1}: no winner after {result.turns} turns")

    flask_app.cli.add_command(simulate_command)

    return flask_app
