import os

from hypothesis import settings


# "ci" covers all 256 rating bytes in the banding test
settings.register_profile("ci", max_examples=500, deadline=None)
settings.register_profile("quick", max_examples=20)

settings.load_profile(os.environ.get(
    "TAGFRAMES_HYPOTHESIS_PROFILE", "ci" if "CI" in os.environ else "default"))
