#!/usr/bin/env python3
import httpx
import sys
import os

# Health endpoint of the local server, PORT defaults to 8000
port = os.environ.get("PORT", 8000)
url = f"http://localhost:{port}/health"

try:
    response = httpx.get(url, timeout=5)

    if response.status_code == 200:
        body = response.json()
        if not body.get("vision_configured"):
            print("Health check warning: OPENAI_API_KEY is not configured, flyer analysis returns 503")
        print(f"Health check passed: {body}")
        sys.exit(0)
    else:
        print(f"Health check failed: HTTP {response.status_code}")
        sys.exit(1)
except httpx.HTTPError as e:
    print(f"Health check failed: {str(e)}")
    sys.exit(1)
