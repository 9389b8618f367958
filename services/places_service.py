"""
Places Service - business search and address lookup through Gemini

Thin wrapper over the Gemini ``generateContent`` REST endpoint:
a Google Maps grounded call finds the places and a second call with a JSON
response schema turns the answer into structured data.

Lookups never raise to the caller: any failure is logged and the caller gets
an empty result, the same way the mobile app degrades when the service is down.
"""

import json
import logging
import random
from typing import Any, Dict, List, Optional

import requests
from flask import current_app

from utils.timezone_helper import now_ms

logger = logging.getLogger(__name__)

PLACE_SCHEMA = {
    'type': 'ARRAY',
    'items': {
        'type': 'OBJECT',
        'properties': {
            'name': {'type': 'STRING'},
            'address': {'type': 'STRING'},
            'type': {'type': 'STRING'},
        },
    },
}

ADDRESS_LIST_SCHEMA = {
    'type': 'ARRAY',
    'items': {'type': 'STRING'},
}

COORDINATES_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'lat': {'type': 'NUMBER'},
        'lng': {'type': 'NUMBER'},
    },
}


class PlacesServiceError(Exception):
    """Raised internally when Gemini cannot be reached or answers garbage."""
    pass


class PlacesService:
    """
    Service for nearby business search, address autocomplete, geocoding
    and visit feedback sentiment.
    """

    # Max offset (degrees) added to markers; Gemini does not return coordinates
    JITTER = 0.005

    def __init__(self, api_key=None, model=None, api_url=None, timeout=None):
        config = current_app.config
        self.api_key = api_key or config.get('GEMINI_API_KEY')
        self.model = model or config.get('GEMINI_MODEL', 'gemini-2.5-flash')
        self.api_url = (api_url or config.get('GEMINI_API_URL', '')).rstrip('/')
        self.timeout = timeout or config.get('GEMINI_TIMEOUT', 30)

    @property
    def is_configured(self):
        return bool(self.api_key and self.api_url)

    # --- Low level ---

    def _generate(self, prompt: str, tools=None, tool_config=None, response_schema=None) -> str:
        """
        Call generateContent and return the concatenated text of the first candidate.

        Raises:
            PlacesServiceError: on network errors, non-200 answers or empty candidates
        """
        body: Dict[str, Any] = {
            'contents': [{'role': 'user', 'parts': [{'text': prompt}]}],
        }
        if tools:
            body['tools'] = tools
        if tool_config:
            body['toolConfig'] = tool_config
        if response_schema:
            body['generationConfig'] = {
                'responseMimeType': 'application/json',
                'responseSchema': response_schema,
            }

        try:
            response = requests.post(
                f"{self.api_url}/{self.model}:generateContent",
                headers={
                    'Content-Type': 'application/json',
                    'x-goog-api-key': self.api_key,
                },
                json=body,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise PlacesServiceError(f"Network error calling Gemini: {e}")

        if response.status_code != 200:
            raise PlacesServiceError(
                f"Gemini API error: {response.status_code} - {response.text[:200]}"
            )

        try:
            candidates = response.json().get('candidates') or []
            parts = candidates[0]['content']['parts'] if candidates else []
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise PlacesServiceError(f"Unexpected Gemini response: {e}")

        text = ''.join(part.get('text', '') for part in parts if isinstance(part, dict))
        if not text:
            raise PlacesServiceError("Gemini returned no text")
        return text

    def _generate_json(self, prompt: str, schema: Dict[str, Any]):
        text = self._generate(prompt, response_schema=schema)
        try:
            return json.loads(text)
        except ValueError as e:
            raise PlacesServiceError(f"Gemini returned invalid JSON: {e}")

    # --- Public API ---

    def search_nearby(self, query: str, lat: float, lng: float) -> List[Dict[str, Any]]:
        """
        Find up to 10 places matching ``query`` around (lat, lng).

        Returns:
            List of {id, name, address, type, location}; empty on any failure
        """
        if not self.is_configured:
            logger.warning("Gemini API not configured. Skipping place search.")
            return []

        try:
            search_text = self._generate(
                f'Find 10 places matching "{query}" near location {lat}, {lng}. '
                'Return a detailed list including the full specific address for each.',
                tools=[{'googleMaps': {}}],
                tool_config={
                    'retrievalConfig': {
                        'latLng': {'latitude': lat, 'longitude': lng}
                    }
                },
            )
            parsed = self._generate_json(
                'Based on the following search results from Google Maps, format them into a '
                "valid JSON array. Each object must have: 'name', 'address' (full street address), "
                f"'type' (category).\n\nSearch Context: {search_text}",
                PLACE_SCHEMA,
            )
        except PlacesServiceError as e:
            logger.error(f"Error searching places for '{query}': {e}")
            return []

        if not isinstance(parsed, list):
            logger.error(f"Place search for '{query}' did not return a list")
            return []

        stamp = now_ms()
        places = []
        for i, item in enumerate(parsed):
            if not isinstance(item, dict) or not item.get('name'):
                continue
            places.append({
                'id': f'place-{stamp}-{i}',
                'name': item.get('name'),
                'address': item.get('address') or '',
                'type': item.get('type'),
                'location': {
                    'lat': lat + random.uniform(-self.JITTER, self.JITTER),
                    'lng': lng + random.uniform(-self.JITTER, self.JITTER),
                },
            })

        logger.info(f"Place search '{query}' returned {len(places)} results")
        return places

    def suggest_addresses(self, text: str, lat: float, lng: float) -> List[str]:
        """Up to 5 real-world address completions for what the user is typing."""
        if not self.is_configured:
            logger.warning("Gemini API not configured. Skipping address suggestions.")
            return []

        try:
            parsed = self._generate_json(
                f'The user is manually typing an address: "{text}". '
                f'The user is currently near Lat: {lat}, Lng: {lng}. '
                'Provide 5 distinct, specific, real-world address suggestions that complete what '
                'they are typing. Include street names and numbers. '
                'Return ONLY a JSON array of strings.',
                ADDRESS_LIST_SCHEMA,
            )
        except PlacesServiceError as e:
            logger.error(f"Address suggestion error: {e}")
            return []

        if not isinstance(parsed, list):
            return []
        return [s for s in parsed if isinstance(s, str) and s.strip()][:5]

    def geocode(self, address: str) -> Optional[Dict[str, float]]:
        """
        Coordinates for a street address.

        Returns:
            {'lat': float, 'lng': float} or None when they cannot be extracted
        """
        if not self.is_configured:
            logger.warning("Gemini API not configured. Skipping geocoding.")
            return None

        try:
            search_text = self._generate(
                'Find the exact geographic coordinates (latitude and longitude) for this '
                f'specific address: "{address}".',
                tools=[{'googleMaps': {}}],
            )
            data = self._generate_json(
                'Extract the latitude and longitude from this text. Return a JSON object with '
                f'"lat" and "lng" keys.\n\nText: {search_text}',
                COORDINATES_SCHEMA,
            )
        except PlacesServiceError as e:
            logger.error(f"Geocoding error for '{address}': {e}")
            return None

        if not isinstance(data, dict):
            return None
        lat, lng = data.get('lat'), data.get('lng')
        if isinstance(lat, bool) or isinstance(lng, bool):
            return None
        if isinstance(lat, (int, float)) and isinstance(lng, (int, float)):
            return {'lat': float(lat), 'lng': float(lng)}
        return None

    def analyze_sentiment(self, feedback: str) -> str:
        """Classify visit feedback as positive, neutral or negative (neutral on failure)."""
        if not self.is_configured or not (feedback or '').strip():
            return 'neutral'

        try:
            text = self._generate(
                'Analyze the sentiment of this sales visit feedback. Return ONLY one word: '
                f'"positive", "neutral", or "negative".\n\nFeedback: "{feedback}"'
            )
        except PlacesServiceError as e:
            logger.warning(f"Sentiment analysis failed: {e}")
            return 'neutral'

        text = text.lower().strip()
        if 'positive' in text:
            return 'positive'
        if 'negative' in text:
            return 'negative'
        return 'neutral'
