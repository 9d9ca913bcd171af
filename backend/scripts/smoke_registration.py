# Minimal integration smoke test for the registration API
# Run:  python scripts/smoke_registration.py   (server already running)
# If needed: pip install requests

import os, sys, uuid
import requests

BASE = os.getenv("BASE_URL", "http://127.0.0.1:8000")
COMMUNITY = os.getenv("SMOKE_COMMUNITY")  # None -> server default


def main():
    print(f"→ Using API {BASE}")

    # 1) Which Sunday is the form offering?
    r = requests.get(f"{BASE}/registrations/sunday", params={"weeks": 3}, timeout=10); r.raise_for_status()
    target = r.json()
    print(f"✓ Target Sunday {target['date']} ({target['label']}), today={target['isToday']}")
    assert len(target["upcoming"]) == 3, "expected three upcoming Sundays"

    # 2) Sundays before the submit
    params = {"community": COMMUNITY} if COMMUNITY else {}
    r = requests.get(f"{BASE}/dashboards/sundays", params=params, timeout=10); r.raise_for_status()
    before = {row["label"]: row for row in r.json()["rows"]}
    before_total = before.get(target["date"], {}).get("total", 0)

    # 3) Household of two sharing one address + one guest with their own
    tag = uuid.uuid4().hex[:6]
    payload = {
        "community": COMMUNITY,
        "sundayDate": target["date"],
        "sessionInfo": "SMOKE Service",
        "registrants": [
            {"firstName": "Smoke", "lastName": f"A-{tag}", "email": f"smoke-{tag}@example.org", "type": "Member"},
            {"firstName": "Smoke", "lastName": f"B-{tag}", "email": f"smoke-{tag}@example.org", "type": "Guest"},
            {"firstName": "Smoke", "lastName": f"C-{tag}", "email": f"smoke-{tag}-c@example.org", "type": "Guest"},
        ],
    }
    r = requests.post(f"{BASE}/registrations", json=payload, timeout=30); r.raise_for_status()
    res = r.json()
    assert res["success"] and res["count"] == 3, res
    assert res["emailsSent"] + res["emailErrors"] == 2, "expected one email per unique address"
    print(f"✓ Submitted 3 registrants; emails sent={res['emailsSent']} errors={res['emailErrors']}")

    # 4) Dashboards reflect the new rows
    r = requests.get(f"{BASE}/dashboards/sundays", params=params, timeout=10); r.raise_for_status()
    after = {row["label"]: row for row in r.json()["rows"]}
    assert after[target["date"]]["total"] == before_total + 3, "Sunday total did not move by 3"
    print("✓ Sunday dashboard updated")

    r = requests.get(f"{BASE}/dashboards/yearly", params=params, timeout=10); r.raise_for_status()
    yearly = r.json()
    assert sum(m["total"] for m in yearly["months"]) == yearly["total"]["total"], "monthly rows != year total"
    print("✓ Yearly dashboard consistent")

    # 5) Bad type is rejected
    bad = dict(payload, registrants=[dict(payload["registrants"][0], type="Visitor")])
    r = requests.post(f"{BASE}/registrations", json=bad, timeout=10)
    assert r.status_code == 422, f"expected 422, got {r.status_code}"
    print("✓ Invalid registrant type rejected")

    print("\nALL SMOKE TESTS PASSED ✅")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print("❌ Smoke test failed:", e)
        sys.exit(1)
