from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    allowed_origins = [o.strip() for o in str(flask_app.config.get('CORS_ORIGINS', '')).split(',') if o.strip()]
    CORS(flask_app, origins=allowed_origins)

    # Import and register blueprints here
    from pixeltrivia.main import main
    flask_app.register_blueprint(main)

    from pixeltrivia.api.rooms import rooms
    # Mount room routes under /api to match frontend API client
    flask_app.register_blueprint(rooms, url_prefix='/api/room')

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        if exc.code is None or exc.code < 400:
            # Routing redirects pass through untouched
            return exc
        return jsonify({'success': False, 'error': exc.description, 'code': exc.name.upper().replace(' ', '_')}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        flask_app.logger.exception(f"[unhandled] {exc.__class__.__name__}")
        return jsonify({'success': False, 'error': 'An unexpected error occurred', 'code': 'SERVER_ERROR'}), 500

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from pixeltrivia.seed import seed_question_bank
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            added = seed_question_bank()
            click.echo(f'Database has been reset and seeded with {added} questions!')

    @click.command('seed-questions')
    def seed_questions_command():
        """Loads the sample question bank, skipping questions already present."""
        from pixeltrivia.seed import seed_question_bank
        with flask_app.app_context():
            added = seed_question_bank()
            click.echo(f'Added {added} questions to the bank.')

    @click.command('cleanup-rooms')
    @click.option('--hours', type=int, default=None, help='Age threshold; defaults to STALE_ROOM_HOURS.')
    def cleanup_rooms_command(hours):
        """Deletes waiting rooms that were never started."""
        from pixeltrivia.services.rooms.lifecycle import purge_stale_rooms
        with flask_app.app_context():
            removed = purge_stale_rooms(hours)
            click.echo(f'Removed {removed} stale rooms.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_questions_command)
    flask_app.cli.add_command(cleanup_rooms_command)

    return flask_app
