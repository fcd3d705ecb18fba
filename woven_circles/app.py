import logging

from flask import Flask, jsonify, redirect, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from woven_circles.access import resolve_access
from woven_circles.auth_helpers import has_session
from woven_circles.config import Config
from woven_circles.errors import MutualAidError
from woven_circles.supabase_client import init_supabase
from woven_circles.workspace import init_workspace
from woven_circles.routes.auth import auth_bp
from woven_circles.routes.feed import feed_bp
from woven_circles.routes.resources import resources_bp
from woven_circles.routes.profile import profile_bp
from woven_circles.routes.pages import pages_bp

logger = logging.getLogger(__name__)

def create_app(config_object=Config, supabase_client=None):
    app = Flask(__name__)
    app.config.from_object(config_object)
    Config.validate(app.config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # Initialize extensions
    CORS(app)
    JWTManager(app)

    # Initialize Supabase client and the shared stores
    with app.app_context():
        init_supabase(app, supabase_client)
        init_workspace(app)
        logger.info("✓ Connected to Supabase: %s", app.config['SUPABASE_URL'])

    @app.errorhandler(MutualAidError)
    def handle_mutual_aid_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.before_request
    def enforce_route_access():
        if request.path.startswith('/api/'):
            return None
        location = resolve_access(request.path, has_session())
        if location:
            return redirect(location)
        return None

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(feed_bp, url_prefix='/api/posts')
    app.register_blueprint(resources_bp, url_prefix='/api/resources')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')
    app.register_blueprint(pages_bp)

    return app

if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=5000, debug=True)
