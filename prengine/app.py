from flask import Flask, jsonify
import psycopg2
import psycopg2.pool
import os
from urllib.parse import urlparse
import logging
import atexit
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from prengine.constants import AVAILABLE_PLATES_LBS, OLYMPIC_BAR_WEIGHT_LBS
from prengine.errors import InvalidInput
from prengine.plates import PlateInventory
from prengine.preferences_cache import PreferencesCache, DEFAULT_CACHE_TTL_SECONDS

app = Flask(__name__)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = app.logger


# --- Rate Limiter Configuration ---
RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    storage_uri=RATELIMIT_STORAGE_URL,
    strategy="fixed-window",
    enabled=os.getenv("RATELIMIT_ENABLED", "true").lower() == "true",
)
limiter.init_app(app)


# --- Equipment Configuration ---
def load_plate_inventory():
    """Builds the plate inventory from BAR_WEIGHT_LBS and AVAILABLE_PLATES_LBS (comma separated)."""
    bar_raw = os.getenv("BAR_WEIGHT_LBS")
    plates_raw = os.getenv("AVAILABLE_PLATES_LBS")
    try:
        bar_weight = float(bar_raw) if bar_raw else OLYMPIC_BAR_WEIGHT_LBS
        plates = tuple(float(p) for p in plates_raw.split(",") if p.strip()) if plates_raw else AVAILABLE_PLATES_LBS
        return PlateInventory(bar_weight_lbs=bar_weight, plates_lbs=plates)
    except (ValueError, InvalidInput) as e:
        logger.error(f"Invalid plate configuration (BAR_WEIGHT_LBS={bar_raw!r}, AVAILABLE_PLATES_LBS={plates_raw!r}): {e}. Using defaults.")
        return PlateInventory()

plate_inventory = load_plate_inventory()
logger.info(f"Plate inventory: bar {plate_inventory.bar_weight_lbs} lbs, plates {list(plate_inventory.plates_lbs)} lbs")

preferences_cache = PreferencesCache(
    ttl_seconds=float(os.getenv("PREFERENCES_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS))
)


# --- Database Connection Pool Configuration ---
MIN_DB_CONNECTIONS = 1
MAX_DB_CONNECTIONS = 10
db_pool = None

def get_db_connection_params():
    """Determines database connection parameters."""
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        try:
            url = urlparse(database_url)
            return {
                'dbname': url.path[1:],
                'user': url.username,
                'password': url.password,
                'host': url.hostname,
                'port': url.port
            }
        except ValueError as e:
            app.logger.error(f"Failed to parse DATABASE_URL: {e}. Falling back to POSTGRES_* vars.")

    return {
        'dbname': os.getenv("POSTGRES_DB"),
        'user': os.getenv("POSTGRES_USER"),
        'password': os.getenv("POSTGRES_PASSWORD"),
        'host': os.getenv("POSTGRES_HOST"),
        'port': os.getenv("POSTGRES_PORT", "5432")
    }

def init_db_pool():
    """Initializes the database connection pool."""
    global db_pool
    if db_pool is None:
        params = get_db_connection_params()
        if not all(params.values()):
            # The calculator endpoints work without a database
            app.logger.warning("Database connection parameters are incomplete. Pool not initialized.")
            return

        app.logger.info(f"Initializing database connection pool for host '{params.get('host')}' db '{params.get('dbname')}'")
        try:
            db_pool = psycopg2.pool.SimpleConnectionPool(
                MIN_DB_CONNECTIONS,
                MAX_DB_CONNECTIONS,
                **params
            )
        except psycopg2.OperationalError as e:
            app.logger.error(f"Failed to initialize database pool: {e}")
            raise
        app.logger.info("Database connection pool initialized successfully.")

init_db_pool()

@atexit.register
def close_db_pool():
    global db_pool
    if db_pool:
        app.logger.info("Closing database connection pool.")
        db_pool.closeall()
        db_pool = None


# --- Database Connection Helper ---
def get_db_connection():
    """Gets a connection from the database pool."""
    if db_pool is None:
        logger.error("Database pool is not initialized. Attempting to re-initialize.")
        init_db_pool()
        if db_pool is None:
            logger.critical("Failed to re-initialize database pool. Cannot get connection.")
            raise psycopg2.OperationalError("Database pool not available.")
    try:
        return db_pool.getconn()
    except psycopg2.pool.PoolError as e:
        logger.error(f"Failed to get connection from pool: {e}")
        raise

def release_db_connection(conn):
    """Releases a connection back to the database pool."""
    if db_pool and conn:
        try:
            db_pool.putconn(conn)
        except psycopg2.pool.PoolError as e:
            logger.error(f"Error releasing connection back to pool: {e}")


# --- Error Handlers ---
@app.errorhandler(InvalidInput)
def handle_invalid_input(e):
    logger.warning(f"Rejected input: {e}")
    return jsonify(error=str(e)), 400


@app.errorhandler(Exception)
def handle_exception(e):
    """Generic exception handler."""
    if isinstance(e, HTTPException):
        return e
    app.logger.error(f"Unhandled exception: {e}", exc_info=True)
    if isinstance(e, psycopg2.pool.PoolError):
        return jsonify(error="Database pool error"), 503
    if isinstance(e, psycopg2.OperationalError):
        return jsonify(error="Database connection error"), 503
    return jsonify(error="An internal server error occurred"), 500


@app.route('/health', methods=['GET'])
@limiter.exempt
def health():
    return jsonify(status="ok", database=db_pool is not None)


# Import blueprints after the pool and helpers exist
from .blueprints.calculator import calculator_bp  # noqa: E402
from .blueprints.records import records_bp  # noqa: E402

app.register_blueprint(calculator_bp)
app.register_blueprint(records_bp)
