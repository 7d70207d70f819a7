"""
Load testing script for the signage scheduling API using locust.

Install: pip install locust
Run:     locust -f loadtests/locustfile.py --host http://localhost:8000

Device and group ids come from the environment so a seeded fleet can be
polled; unknown ids still exercise the request path (404).
"""
import os
import random
import uuid
from datetime import date

from locust import HttpUser, between, task

DEVICE_IDS = [d for d in os.environ.get("LOADTEST_DEVICE_IDS", "").split(",") if d] or [str(uuid.uuid4())]
GROUP_IDS = [g for g in os.environ.get("LOADTEST_GROUP_IDS", "").split(",") if g] or [str(uuid.uuid4())]
TENANT_ID = os.environ.get("LOADTEST_TENANT_ID", str(uuid.uuid4()))


class DeviceUser(HttpUser):
    """Simulates a screen polling for what to show."""

    wait_time = between(5, 15)
    weight = 9  # the fleet dominates traffic

    @task(10)
    def poll_device(self):
        self.client.get(f"/api/v1/resolve/devices/{random.choice(DEVICE_IDS)}", name="/resolve/devices/[id]")

    @task(1)
    def poll_group(self):
        self.client.get(f"/api/v1/resolve/groups/{random.choice(GROUP_IDS)}", name="/resolve/groups/[id]")


class OperatorUser(HttpUser):
    """Simulates an editor reviewing schedules."""

    wait_time = between(3, 8)
    weight = 1

    def on_start(self):
        self.headers = {"X-Tenant-Id": TENANT_ID, "X-User-Role": "manager"}
        response = self.client.get("/api/v1/schedules", headers=self.headers)
        self.schedule_ids = [s["id"] for s in response.json()] if response.status_code == 200 else []

    @task(3)
    def list_schedules(self):
        self.client.get("/api/v1/schedules", headers=self.headers)

    @task(2)
    def preview_week(self):
        if self.schedule_ids:
            self.client.get(
                f"/api/v1/schedules/{random.choice(self.schedule_ids)}/preview/week",
                params={"start_date": date.today().isoformat()},
                headers=self.headers,
                name="/schedules/[id]/preview/week",
            )

    @task(1)
    def list_dayparts(self):
        self.client.get("/api/v1/dayparts", headers=self.headers)

    @task(1)
    def health_check(self):
        self.client.get("/health")
