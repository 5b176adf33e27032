"""
Load testing for the Ping service using Locust.

Run with ``locust -f tests/performance/locustfile.py --host http://localhost:3000``.
GET traffic is expected to start failing with 429 once the admission gate
closes; those responses are reported as "Admission gate closed" so they can be
told apart from real errors.
"""

import random

from locust import HttpUser, TaskSet, task, between


JSON_HEADERS = {"Content-Type": "application/json"}


class PingTasks(TaskSet):
    """Exercise every handled method."""

    @task(5)
    def get_ping(self):
        with self.client.get("/", catch_response=True) as response:
            if response.status_code == 200:
                if response.json().get("ping") == "pong":
                    response.success()
                else:
                    response.failure("Missing ping field in response")
            elif response.status_code == 429:
                response.failure("Admission gate closed")
            else:
                response.failure(f"Unexpected status code: {response.status_code}")

    @task(3)
    def post_hello(self):
        body = {"hello": "world"} if random.random() < 0.8 else {"hello": "moon"}
        with self.client.post("/", json=body, headers=JSON_HEADERS, catch_response=True) as response:
            expected = 200 if body["hello"] == "world" else 400
            if response.status_code == expected:
                response.success()
            else:
                response.failure(f"Expected {expected}, got {response.status_code}")

    @task(1)
    def echo_methods(self):
        method = random.choice(["PUT", "PATCH", "DELETE"])
        with self.client.request(
            method, "/", json={"id": random.randint(1, 1000)}, headers=JSON_HEADERS,
            catch_response=True, name=f"{method} /"
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Unexpected status code: {response.status_code}")

    @task(1)
    def admission_stats(self):
        self.client.get("/admission")


class PingUser(HttpUser):
    """Simulated Ping client."""
    tasks = [PingTasks]
    wait_time = between(0.1, 0.5)
