"""
Dispatch engine: turns a work order and its candidate pools into ranked
technician/vendor recommendations and one recommended assignment.

Modules
-------
factors  : per-factor calculators in [0, 1] + with_default() — pure functions.
scorer   : TechnicianFactors / VendorFactors + weighted scoring + reasoning.
ranker   : rank_candidates() + top_n() + determine_best_assignment().
engine   : DispatchEngine — snapshot reads, scoring, ranking, decision.
cache    : RecommendationCache + CachedDispatchEngine — TTL response cache.
reporter : format_recommendation() + write_recommendation_json() — output.
"""
