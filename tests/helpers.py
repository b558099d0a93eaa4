class FixedRandom:
    """Deterministic stand-in for random.Random: always picks the first cell."""

    def __init__(self, value=0.0):
        self.value = value
        self.choice_calls = []
        self.random_calls = 0

    def choice(self, seq):
        self.choice_calls.append(list(seq))
        return seq[0]

    def random(self):
        self.random_calls += 1
        return self.value
