from flask import Flask
from flask_cors import CORS

from beerouting.config import config
from beerouting.routing_api import routing_bp


def create_app() -> Flask:
    """Initialize Flask App with the routing blueprint mounted under /api"""
    app = Flask(__name__)
    CORS(app)
    app.register_blueprint(routing_bp, url_prefix='/api')
    return app


app = create_app()

if __name__ == '__main__':
    api_config = config.get_api_config()
    print(f"\n🐝 BeeRoute backend running at: http://{api_config['host']}:{api_config['port']}\n")
    app.run(**api_config)
