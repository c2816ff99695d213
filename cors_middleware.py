"""
CORS middleware that evaluates a fixed cross-origin policy in front of a WSGI app.

Preflight requests are answered directly by the middleware. Actual
cross-origin requests are passed to the wrapped application and the
response is decorated with the CORS headers the policy allows.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from werkzeug.wrappers import Request, Response

logger = logging.getLogger(__name__)

OPTION_NAMES = {
    'allowedHeaders': 'allowed_headers',
    'allowedMethods': 'allowed_methods',
    'allowedOrigins': 'allowed_origins',
    'exposedHeaders': 'exposed_headers',
    'maxAge': 'max_age',
    'supportsCredentials': 'supports_credentials',
}


def _as_tuple(name: str, values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, (str, bytes)):
        raise ValueError(f"{name} must be a collection of strings, not a single string")
    return tuple(values)


@dataclass(frozen=True)
class PolicyConfig:
    """Immutable CORS policy, built once and shared by every request."""

    allowed_headers: frozenset = field(default_factory=frozenset)
    allowed_methods: Tuple[str, ...] = ()
    allowed_origins: frozenset = field(default_factory=frozenset)
    exposed_headers: Optional[Tuple[str, ...]] = None
    max_age: Optional[int] = None
    supports_credentials: bool = False

    def __post_init__(self):
        # Header names are compared lower-cased
        headers = _as_tuple('allowed_headers', self.allowed_headers)
        object.__setattr__(self, 'allowed_headers', frozenset(h.lower() for h in headers))

        methods = _as_tuple('allowed_methods', self.allowed_methods)
        # Keep the first occurrence so the advertised list follows config order
        object.__setattr__(self, 'allowed_methods', tuple(dict.fromkeys(methods)))

        origins = _as_tuple('allowed_origins', self.allowed_origins)
        object.__setattr__(self, 'allowed_origins', frozenset(origins))

        if self.exposed_headers is not None:
            exposed = _as_tuple('exposed_headers', self.exposed_headers)
            object.__setattr__(self, 'exposed_headers', exposed)

        if self.max_age is not None:
            if isinstance(self.max_age, bool) or not isinstance(self.max_age, int):
                raise ValueError(f"max_age must be an integer number of seconds, got {self.max_age!r}")
            if self.max_age < 0:
                raise ValueError(f"max_age must not be negative, got {self.max_age}")

        if not isinstance(self.supports_credentials, bool):
            raise ValueError(f"supports_credentials must be True or False, got {self.supports_credentials!r}")

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> 'PolicyConfig':
        """
        Build a policy from a mapping of option names.

        Accepts allowedHeaders, allowedMethods, allowedOrigins, exposedHeaders,
        maxAge and supportsCredentials. Missing options keep their defaults,
        and False or None turns exposedHeaders / maxAge off.
        """
        kwargs = {}
        for key, value in (options or {}).items():
            if key not in OPTION_NAMES:
                raise ValueError(f"Unknown CORS option: {key}")
            if key in ('exposedHeaders', 'maxAge') and value is False:
                value = None
            kwargs[OPTION_NAMES[key]] = value
        return cls(**kwargs)

    def is_origin_allowed(self, origin: str) -> bool:
        return origin in self.allowed_origins

    def is_method_allowed(self, method: str) -> bool:
        return method in self.allowed_methods


class Allowed:
    """Marker result: every preflight check passed."""

    def __repr__(self):
        return 'Allowed()'


ALLOWED = Allowed()


@dataclass(frozen=True)
class Rejected:
    """A preflight check failed; `response` is what the client gets back."""

    response: Response


PreflightResult = Union[Allowed, Rejected]


class WSGIHandler:
    """Adapts a plain WSGI application to the handle(request) contract."""

    def __init__(self, app):
        self.app = app

    def handle(self, request: Request) -> Response:
        return Response.from_app(self.app, request.environ)


def as_handler(app):
    """Return `app` itself if it already exposes handle(), else wrap it."""
    if callable(getattr(app, 'handle', None)):
        return app
    return WSGIHandler(app)


class CORSMiddleware:
    """
    Evaluates a CORS policy around a wrapped handler.

    The wrapped object may be a WSGI application, anything with a
    handle(request) -> response method, or another CORSMiddleware.
    """

    def __init__(self, app, config: Optional[PolicyConfig] = None):
        self.app = app
        self.handler = as_handler(app)
        self.config = config if config is not None else PolicyConfig()

    def __call__(self, environ, start_response):
        response = self.handle(Request(environ))
        return response(environ, start_response)

    def handle(self, request: Request) -> Response:
        if 'Origin' not in request.headers:
            return self.handler.handle(request)

        if request.method == 'OPTIONS' and 'Access-Control-Request-Method' in request.headers:
            return self.handle_preflight_request(request)

        response = self.handler.handle(request)
        return self.add_actual_request_headers(response, request.headers.get('Origin'))

    def handle_preflight_request(self, request: Request) -> Response:
        result = self.check_preflight(request)
        if isinstance(result, Rejected):
            return result.response
        return self.build_preflight_response(request)

    def check_preflight(self, request: Request) -> PreflightResult:
        """Run the origin, method and header checks for a preflight request."""
        origin = request.headers.get('Origin')
        if not self.config.is_origin_allowed(origin):
            logger.debug("Preflight rejected, origin not allowed: %s", origin)
            return Rejected(self._bad_request(403, 'Origin not allowed'))

        method = request.headers.get('Access-Control-Request-Method')
        if not self.config.is_method_allowed(method):
            logger.debug("Preflight rejected, method not allowed: %s", method)
            return Rejected(self._bad_request(405, 'Method not allowed'))

        if 'Access-Control-Request-Headers' in request.headers:
            requested = request.headers.get('Access-Control-Request-Headers').lower()
            for header in requested.split(','):
                if header.strip() not in self.config.allowed_headers:
                    logger.debug("Preflight rejected, header not allowed: %r", header.strip())
                    return Rejected(self._bad_request(403, 'Header not allowed'))

        return ALLOWED

    def build_preflight_response(self, request: Request) -> Response:
        response = Response()

        if self.config.supports_credentials:
            response.headers['Access-Control-Allow-Credentials'] = 'true'

        response.headers['Access-Control-Allow-Origin'] = request.headers.get('Origin')

        if self.config.max_age is not None:
            response.headers['Access-Control-Max-Age'] = str(self.config.max_age)

        response.headers['Access-Control-Allow-Methods'] = ', '.join(self.config.allowed_methods)

        # Echoed back exactly as the browser sent it
        if 'Access-Control-Request-Headers' in request.headers:
            response.headers['Access-Control-Allow-Headers'] = request.headers.get('Access-Control-Request-Headers')

        return response

    def add_actual_request_headers(self, response: Response, origin: str) -> Response:
        if not self.config.is_origin_allowed(origin):
            logger.debug("Origin not allowed, response left without CORS headers: %s", origin)
            return response

        response.headers['Access-Control-Allow-Origin'] = origin

        # Multiple Vary lines are folded into one so none of them is lost
        vary = response.headers.getlist('Vary')
        if not vary:
            response.headers['Vary'] = 'Origin'
        else:
            response.headers['Vary'] = f"{', '.join(vary)}, Origin"

        if self.config.supports_credentials:
            response.headers['Access-Control-Allow-Credentials'] = 'true'

        if self.config.exposed_headers:
            response.headers['Access-Control-Exposed-Headers'] = ', '.join(self.config.exposed_headers)

        return response

    @staticmethod
    def _bad_request(status: int, reason: str) -> Response:
        return Response(reason, status=status)


def apply_cors(app, config: Optional[PolicyConfig] = None, **options):
    """Apply the CORS middleware to a WSGI app (e.g. a Flask app's wsgi_app)."""
    if config is None:
        config = PolicyConfig.from_options(options)
    return CORSMiddleware(app, config)
