"""
ccheck core: loading, dispatch, aggregation and orchestration.
"""
