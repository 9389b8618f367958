"""
Places routes - nearby business search and address lookup for the map and visit form.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required

from extensions import cache
from services.places_service import PlacesService

places_bp = Blueprint('places', __name__)

SEARCH_CACHE_SECONDS = 300


def _coordinates():
    """Read ?lat=&lng= from the query string; None if missing or not numeric."""
    lat = request.args.get('lat', type=float)
    lng = request.args.get('lng', type=float)
    if lat is None or lng is None:
        return None
    return lat, lng


@places_bp.route('/places/search')
@login_required
def search_places():
    query = (request.args.get('q') or '').strip()
    coords = _coordinates()
    if not query or coords is None:
        return jsonify({'error': 'Parámetros q, lat y lng son requeridos'}), 400

    cache_key = f'places_search:{query.lower()}:{coords[0]}:{coords[1]}'
    places = cache.get(cache_key)
    if places is None:
        places = PlacesService().search_nearby(query, *coords)
        # Empty results are never cached: a failed Gemini call also returns []
        if places:
            cache.set(cache_key, places, timeout=SEARCH_CACHE_SECONDS)
    return jsonify(places)


@places_bp.route('/places/suggest')
@login_required
def suggest_addresses():
    text = (request.args.get('q') or '').strip()
    coords = _coordinates()
    if not text or coords is None:
        return jsonify({'error': 'Parámetros q, lat y lng son requeridos'}), 400

    return jsonify(PlacesService().suggest_addresses(text, *coords))


@places_bp.route('/places/geocode')
@login_required
def geocode():
    address = (request.args.get('address') or '').strip()
    if not address:
        return jsonify({'error': 'El parámetro address es requerido'}), 400

    coords = PlacesService().geocode(address)
    if coords is None:
        return jsonify({'error': 'No se pudo geolocalizar la dirección'}), 404
    return jsonify(coords)
