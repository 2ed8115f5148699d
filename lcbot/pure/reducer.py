r"""Normal-order (leftmost-outermost) beta reduction with a wall-clock budget.

Normal order is normalizing: if a term has a beta-normal form, repeatedly stepping finds it. Terms without one (e.g.
`(\x.x x)(\x.x x)`) step forever, so the loop checks a deadline between steps and gives up once it passes. No
thread is involved: when beta_reduce returns, no work is left running.
"""

import time

from lcbot.pure.term import LambdaTerm


class NormalOrderReducer:
    """Implements normal-order beta reduction of a syntax tree."""
    DEFAULT_LIMIT = 1  # seconds

    def __init__(self, tree, on_step=None, max_steps=None):
        """tree is the LambdaTerm to reduce. on_step(step_num, tree) is called after every contraction, and max_steps
        bounds the number of contractions on top of the time limit.
        """
        assert isinstance(tree, LambdaTerm), f"expected LambdaTerm, got {type(tree).__name__}"
        self.tree = tree
        self.on_step = on_step
        self.max_steps = max_steps

        self.steps = 0
        self.reduced = False

    def beta_reduce(self, limit=DEFAULT_LIMIT):
        """Steps self.tree until it is in beta-normal form or limit seconds have passed. Returns the normal form, or
        None if time (or max_steps) ran out. self.tree holds the last term reached either way.
        """
        deadline = time.monotonic() + limit

        while self.tree.has_redex():
            if time.monotonic() >= deadline:
                return None
            if self.max_steps is not None and self.steps >= self.max_steps:
                return None

            self.tree = self.tree.step()
            self.steps += 1
            if self.on_step is not None:
                self.on_step(self.steps, self.tree)

        self.reduced = True
        return self.tree

    def __repr__(self):
        return f"{type(self).__name__}({self.tree!r}, steps={self.steps})"

    def __str__(self):
        return self.tree.display()


def reduce_to_normal_form(tree, limit=NormalOrderReducer.DEFAULT_LIMIT):
    """Returns the beta-normal form of tree, or None if it wasn't reached within limit seconds."""
    return NormalOrderReducer(tree).beta_reduce(limit)
