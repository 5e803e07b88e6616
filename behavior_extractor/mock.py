"""
Mock session generator for testing and development.

Generates synthetic session traces from common web-shop use-case flows.
"""

import random
import uuid
from typing import Optional

from .models import ObservedUseCaseExecution, Session, UseCase


USE_CASES = {
    "login": UseCase("uc_login", "Login"),
    "browse": UseCase("uc_browse", "Browse Catalog"),
    "search": UseCase("uc_search", "Search"),
    "view_item": UseCase("uc_view_item", "View Item"),
    "add_to_cart": UseCase("uc_add_to_cart", "Add To Cart"),
    "checkout": UseCase("uc_checkout", "Checkout"),
    "logout": UseCase("uc_logout", "Logout"),
}

# Common flow templates
FLOW_TEMPLATES = {
    "browse_and_buy": {
        "description": "User browses, picks an item and checks out",
        "steps": ["login", "browse", "view_item", "add_to_cart", "checkout", "logout"],
        "completion_rate": 0.70,
    },
    "search_and_buy": {
        "description": "User searches and buys directly",
        "steps": ["login", "search", "view_item", "add_to_cart", "checkout", "logout"],
        "completion_rate": 0.75,
    },
    "window_shopping": {
        "description": "User looks at several items without buying",
        "steps": ["browse", "view_item", "browse", "view_item", "browse", "view_item"],
        "completion_rate": 0.90,
    },
    "repeated_search": {
        "description": "User refines a search several times",
        "steps": ["search", "search", "search", "view_item"],
        "completion_rate": 0.85,
    },
    "bounce": {
        "description": "User leaves right after arriving",
        "steps": ["browse"],
        "completion_rate": 1.0,
    },
}


class MockSessionGenerator:
    """Generates synthetic session traces for testing."""

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize the generator.

        Args:
            seed: Random seed for reproducibility
        """
        self.rng = random.Random(seed)

    def generate_session(
        self,
        template_name: Optional[str] = None,
        session_id: Optional[str] = None,
        base_time: int = 0,
        clock_skew: bool = False,
    ) -> Session:
        """
        Generate a single session.

        Args:
            template_name: Flow template to use (random if None)
            session_id: Session ID (generated if None)
            base_time: Start time of the first execution, in milliseconds
            clock_skew: Move one execution back in time, producing a
                negative time range (needs at least two steps)

        Returns:
            Generated Session
        """
        if template_name is None:
            template_name = self.rng.choice(list(FLOW_TEMPLATES.keys()))

        template = FLOW_TEMPLATES[template_name]
        session_id = session_id or str(uuid.uuid4())

        steps = template["steps"]
        if self.rng.random() >= template["completion_rate"] and len(steps) > 1:
            # Truncate at random point
            cutoff = self.rng.randint(1, len(steps) - 1)
            steps = steps[:cutoff]

        executions = []
        current_time = base_time
        for i, step in enumerate(steps):
            if i > 0:
                # Think time between executions (100ms to 5s)
                current_time += self.rng.randint(100, 5000)
            duration = self.rng.randint(10, 300)
            executions.append(ObservedUseCaseExecution(
                use_case=USE_CASES[step],
                start_time=current_time,
                end_time=current_time + duration,
            ))

        if clock_skew and len(executions) > 1:
            victim = executions[self.rng.randint(1, len(executions) - 1)]
            victim.start_time = base_time - self.rng.randint(1, 1000)
            victim.end_time = victim.start_time + 10

        return Session(session_id=session_id, executions=executions)

    def generate_batch(
        self,
        count: int,
        template_weights: Optional[dict[str, float]] = None,
        skew_rate: float = 0.0,
    ) -> list[Session]:
        """
        Generate multiple sessions.

        Args:
            count: Number of sessions to generate
            template_weights: Probability weights for each template
            skew_rate: Fraction of sessions with a clock-skewed execution

        Returns:
            List of generated Sessions
        """
        if template_weights is None:
            template_weights = {
                "browse_and_buy": 0.30,
                "search_and_buy": 0.25,
                "window_shopping": 0.25,
                "repeated_search": 0.10,
                "bounce": 0.10,
            }

        templates = list(template_weights.keys())
        weights = [template_weights.get(t, 0.1) for t in templates]

        sessions = []
        for i in range(count):
            template = self.rng.choices(templates, weights=weights)[0]
            sessions.append(self.generate_session(
                template_name=template,
                session_id=f"mock_session_{i:05d}",
                base_time=self.rng.randint(0, 86_400_000),
                clock_skew=self.rng.random() < skew_rate,
            ))
        return sessions


def generate_sample_sessions(count: int = 100, seed: int = 42) -> list[Session]:
    """
    Convenience function to generate sample sessions.

    Args:
        count: Number of sessions
        seed: Random seed

    Returns:
        List of Sessions
    """
    generator = MockSessionGenerator(seed=seed)
    return generator.generate_batch(count)


if __name__ == "__main__":
    # Demo: generate and print some sessions
    sessions = generate_sample_sessions(10)
    for session in sessions:
        print(f"\n{'='*60}")
        print(f"Session: {session.session_id} | Executions: {session.execution_count} | Duration: {session.duration}ms")
        for execution in session.executions:
            print(f"  [{execution.start_time:>10}] {execution.use_case.name}")
