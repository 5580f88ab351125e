# journeycraft/api.py
import logging
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request

from . import config
from .data_models import (
    Category,
    Coordinate,
    ItineraryRequest,
    Location,
    TransportationType,
    TravelStyle,
    UserPreferences,
    parse_enum,
)
from .destination_source import SEARCH_RADIUS_M, CatalogDestinationSource, load_catalog
from .generation_engine import generate_smart_itinerary
from .geo import InvalidCoordinate
from .itinerary import Itinerary, parse_datetime
from .optimization_engine import optimize_itinerary
from .repository import ItineraryRepository, JsonFileStore, RepositoryError
from .routing import TrafficCondition, plan_route

logger = logging.getLogger(__name__)

bp = Blueprint("journeycraft", __name__)


def _repository() -> ItineraryRepository:
    return current_app.config["REPOSITORY"]


def _destination_source():
    return current_app.config["DESTINATION_SOURCE"]


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _not_found(itinerary_id: str):
    return _error(f"Itinerary {itinerary_id} not found", 404)


def _coordinate_arg(lat_key: str = "lat", lon_key: str = "lon") -> Coordinate:
    coordinate = Coordinate(float(request.args[lat_key]), float(request.args[lon_key]))
    if not coordinate.is_valid:
        raise InvalidCoordinate(f"invalid coordinate ({coordinate.latitude}, {coordinate.longitude})")
    return coordinate


def _coordinate_body(data) -> Coordinate:
    return Coordinate(float(data["latitude"]), float(data["longitude"]))


# --- Itinerary generation and optimization ---

@bp.route('/generate_itinerary', methods=['POST'])
def generate_itinerary():
    try:
        data = request.get_json(silent=True) or {}
        req = ItineraryRequest(**data)
        preferences = UserPreferences.from_dict(req.preferences)
        start_date = parse_datetime(req.start_date)
        end_date = parse_datetime(req.end_date)
    except (TypeError, ValueError, KeyError) as e:
        return _error(f"Invalid input data: {e}", 400)

    if not req.origin.is_valid:
        return _error("Invalid input data: origin coordinate is out of range", 400)

    itinerary = generate_smart_itinerary(
        title=req.title,
        start_date=start_date,
        end_date=end_date,
        origin=req.origin,
        preferences=preferences,
        destination_source=_destination_source(),
    )
    _repository().add(itinerary)
    return jsonify(itinerary.to_dict()), 201


@bp.route('/itineraries/<itinerary_id>/optimize', methods=['POST'])
def optimize(itinerary_id):
    itinerary = _repository().get(itinerary_id)
    if itinerary is None:
        return _not_found(itinerary_id)

    optimized = optimize_itinerary(itinerary)
    _repository().update(optimized)
    return jsonify(optimized.to_dict())


# --- Itinerary CRUD ---

@bp.route('/itineraries', methods=['GET'])
def list_itineraries():
    try:
        style = parse_enum(TravelStyle, request.args["style"]) if request.args.get("style") else None
    except ValueError as e:
        return _error(str(e), 400)

    itineraries = _repository().search(request.args.get("q", ""))
    if style is not None:
        itineraries = [i for i in itineraries if i.travel_style == style]
    if request.args.get("eco", "").lower() in ("1", "true", "yes"):
        itineraries = [i for i in itineraries if i.is_eco_friendly]

    itineraries.sort(key=lambda i: i.updated_at, reverse=True)
    return jsonify({"itineraries": [i.to_dict() for i in itineraries]})


@bp.route('/itineraries', methods=['POST'])
def create_itinerary():
    try:
        data = dict(request.get_json(silent=True) or {})
        data.pop("id", None)
        itinerary = Itinerary.from_dict(data)
    except (TypeError, ValueError, KeyError) as e:
        return _error(f"Invalid input data: {e}", 400)

    _repository().add(itinerary)
    return jsonify(itinerary.to_dict()), 201


@bp.route('/itineraries/<itinerary_id>', methods=['GET'])
def get_itinerary(itinerary_id):
    itinerary = _repository().get(itinerary_id)
    if itinerary is None:
        return _not_found(itinerary_id)
    return jsonify(itinerary.to_dict())


@bp.route('/itineraries/<itinerary_id>', methods=['DELETE'])
def delete_itinerary(itinerary_id):
    if not _repository().delete(itinerary_id):
        return _not_found(itinerary_id)
    return "", 204


@bp.route('/itineraries/<itinerary_id>/duplicate', methods=['POST'])
def duplicate_itinerary(itinerary_id):
    itinerary = _repository().get(itinerary_id)
    if itinerary is None:
        return _not_found(itinerary_id)
    duplicated = _repository().duplicate(itinerary)
    return jsonify(duplicated.to_dict()), 201


# --- Destination editing ---

@bp.route('/itineraries/<itinerary_id>/destinations', methods=['POST'])
def add_destination(itinerary_id):
    itinerary = _repository().get(itinerary_id)
    if itinerary is None:
        return _not_found(itinerary_id)
    try:
        location = Location.from_dict(request.get_json(silent=True) or {})
    except (TypeError, ValueError, KeyError) as e:
        return _error(f"Invalid location: {e}", 400)

    itinerary.add_destination(location)
    _repository().update(itinerary)
    return jsonify(itinerary.to_dict())


@bp.route('/itineraries/<itinerary_id>/destinations/<int(signed=True):index>', methods=['DELETE'])
def remove_destination(itinerary_id, index):
    itinerary = _repository().get(itinerary_id)
    if itinerary is None:
        return _not_found(itinerary_id)

    # out-of-range indices are ignored, mirroring Itinerary.remove_destination_at
    if itinerary.remove_destination_at(index):
        _repository().update(itinerary)
    return jsonify(itinerary.to_dict())


@bp.route('/itineraries/<itinerary_id>/reorder', methods=['POST'])
def reorder_destinations(itinerary_id):
    itinerary = _repository().get(itinerary_id)
    if itinerary is None:
        return _not_found(itinerary_id)
    try:
        data = request.get_json(silent=True) or {}
        from_indices = [int(i) for i in data["from_indices"]]
        to_index = int(data["to_index"])
    except (TypeError, ValueError, KeyError) as e:
        return _error(f"Invalid input data: {e}", 400)

    if itinerary.reorder_destinations(from_indices, to_index):
        _repository().update(itinerary)
    return jsonify(itinerary.to_dict())


# --- Explore ---

@bp.route('/destinations/nearby', methods=['GET'])
def nearby_destinations():
    try:
        around = _coordinate_arg()
        category = parse_enum(Category, request.args["category"]) if request.args.get("category") else None
        radius = float(request.args.get("radius", SEARCH_RADIUS_M))
    except (KeyError, ValueError) as e:
        return _error(f"Invalid query: {e}", 400)

    locations = _destination_source().nearby(category, radius, around)
    return jsonify({"destinations": [l.to_dict() for l in locations]})


@bp.route('/destinations/search', methods=['GET'])
def search_destinations():
    try:
        near = _coordinate_arg()
    except (KeyError, ValueError) as e:
        return _error(f"Invalid query: {e}", 400)

    locations = _destination_source().search(request.args.get("q", ""), near)
    return jsonify({"destinations": [l.to_dict() for l in locations]})


@bp.route('/routes', methods=['POST'])
def route_estimate():
    try:
        data = request.get_json(silent=True) or {}
        origin = _coordinate_body(data["origin"])
        destination = _coordinate_body(data["destination"])
        transportation = parse_enum(TransportationType, data.get("transportation", "mixed"))
        traffic = parse_enum(TrafficCondition, data.get("traffic", "normal"))
        route = plan_route(origin, destination, transportation, traffic)
    except (TypeError, ValueError, KeyError) as e:
        return _error(f"Invalid input data: {e}", 400)

    return jsonify(route.to_dict())


@bp.errorhandler(RepositoryError)
def handle_repository_error(e):
    logger.error("Repository failure: %s", e)
    return _error(str(e), 500)


def create_app(repository: Optional[ItineraryRepository] = None,
               destination_source=None) -> Flask:
    """Build the Flask app; collaborators default to the configured file store and catalog."""
    app = Flask(__name__)

    if repository is None:
        repository = ItineraryRepository(JsonFileStore(config.get_store_path()))
    if destination_source is None:
        catalog = load_catalog(config.get_catalog_path(), config.get_default_origin())
        destination_source = CatalogDestinationSource(catalog)

    app.config["REPOSITORY"] = repository
    app.config["DESTINATION_SOURCE"] = destination_source
    app.register_blueprint(bp)
    return app
