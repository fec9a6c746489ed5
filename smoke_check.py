#!/usr/bin/env python3
"""
Smoke check against a running Independent Business Lead Finder instance.

Usage: python smoke_check.py [base_url] [area] [category]
"""

import requests
import sys

def check_health_endpoint(base_url):
    """Check the health endpoint reports the active filter."""
    try:
        response = requests.get(f"{base_url}/health", timeout=10)
        if response.status_code == 200:
            data = response.json()
            print(f"✅ Health check passed: {data['services']}")
            return True
        else:
            print(f"❌ Health check failed: {response.status_code}")
            return False
    except requests.exceptions.RequestException as e:
        print(f"❌ Health check error: {e}")
        return False

def check_search(base_url, area, category):
    """Run a real search; needs GOOGLE_API_KEY on the server."""
    try:
        response = requests.get(
            f"{base_url}/api/search",
            params={"area": area, "category": category},
            timeout=30
        )

        if response.status_code == 200:
            leads = response.json()["leads"]
            print(f"✅ Search passed: {len(leads)} leads for {area} {category}")
            for lead in leads[:5]:
                print(f"   - {lead['name']} ({lead.get('status') or lead.get('websiteUri') or 'no website'})")
            return True
        else:
            print(f"❌ Search failed: {response.status_code}")
            print(f"Response: {response.text}")
            return False

    except requests.exceptions.RequestException as e:
        print(f"❌ Search error: {e}")
        return False

def check_missing_params(base_url):
    """A search without category must be rejected with 400."""
    try:
        response = requests.get(f"{base_url}/api/search", params={"area": "鎌倉"}, timeout=10)
        if response.status_code == 400 and "error" in response.json():
            print("✅ Missing parameter check passed")
            return True
        else:
            print(f"❌ Expected 400, got {response.status_code}: {response.text}")
            return False
    except requests.exceptions.RequestException as e:
        print(f"❌ Missing parameter check error: {e}")
        return False

def main():
    """Run all checks."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8080"
    area = sys.argv[2] if len(sys.argv) > 2 else "鎌倉"
    category = sys.argv[3] if len(sys.argv) > 3 else "カフェ"

    print(f"🚀 Checking Independent Business Lead Finder at {base_url}")
    print("=" * 50)

    checks = [
        ("Health Check", lambda: check_health_endpoint(base_url)),
        ("Missing Parameter", lambda: check_missing_params(base_url)),
        ("Search", lambda: check_search(base_url, area, category)),
    ]

    passed = 0
    total = len(checks)

    for check_name, check_func in checks:
        print(f"\n🧪 Running {check_name}...")
        if check_func():
            passed += 1
        else:
            print(f"❌ {check_name} failed")

    print("\n" + "=" * 50)
    print(f"📊 Results: {passed}/{total} checks passed")

    return 0 if passed == total else 1

if __name__ == "__main__":
    sys.exit(main())
