"""
Simple script to test CORS headers on a deployment.
Sends a normal GET and an OPTIONS preflight with an Origin header and
reports which CORS headers came back.

Usage:
  python cors_check.py <url> [origin]
"""

import sys
import requests

DEFAULT_ORIGIN = 'http://localhost:3000'


def collect_cors_headers(headers):
    """Pick the Access-Control-* and Vary headers out of a response."""
    return {k: v for k, v in headers.items()
            if k.lower().startswith('access-control-') or k.lower() == 'vary'}


def _report(label, result):
    if 'error' in result:
        print(f"❌ Error making {label} request: {result['error']}")
        return
    print(f"Status: {result['status']}")
    if result['headers']:
        print(f"✅ CORS headers found in {label} response:")
        for k, v in result['headers'].items():
            print(f"  - {k}: {v}")
    else:
        print(f"❌ No CORS headers found in {label} response")


def _probe(send, url, headers, timeout):
    try:
        response = send(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        return {'error': str(e)}
    return {'status': response.status_code, 'headers': collect_cors_headers(response.headers)}


def check_cors_headers(url, origin=DEFAULT_ORIGIN, method='GET', request_headers=None, timeout=10):
    """Check if a URL answers an actual request and a preflight with CORS headers."""
    print(f"Testing CORS for: {url} (origin {origin})")

    print("Testing GET request...")
    get_result = _probe(requests.get, url, {'Origin': origin}, timeout)
    _report('GET', get_result)

    print("\nTesting OPTIONS preflight request...")
    preflight_headers = {
        'Origin': origin,
        'Access-Control-Request-Method': method,
    }
    if request_headers:
        preflight_headers['Access-Control-Request-Headers'] = request_headers
    preflight_result = _probe(requests.options, url, preflight_headers, timeout)
    _report('OPTIONS', preflight_result)

    return {'get': get_result, 'preflight': preflight_result}


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(__doc__)
        return 2

    url = argv[0]
    origin = argv[1] if len(argv) > 1 else DEFAULT_ORIGIN
    results = check_cors_headers(url, origin)

    ok = all('error' not in r and r['headers'] for r in results.values())
    if not ok:
        print("\nIf you see '❌ No CORS headers found', the origin is not allowed or CORS is not configured.")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
