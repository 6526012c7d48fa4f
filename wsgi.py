import os
from wholesale import create_app, db

config_name = os.environ.get('FLASK_ENV', 'production')
app = create_app(config_name)

# Tables are created on startup when the platform gives no shell access
if os.environ.get('AUTO_CREATE_TABLES', 'false').lower() == 'true':
    with app.app_context():
        db.create_all()
        app.logger.info("Database tables verified on startup.")

if __name__ == "__main__":
    app.run()
