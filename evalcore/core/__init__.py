"""
Core building blocks shared by the evaluation engine: exceptions and logging.
"""
