"""
Registry Tests — Behavior of the Registry state machine.

Test Sections:
    test_lifecycle     register / update / transfer / remove / queries
    test_ownership     owner and administrator authority
    test_pause         emergency pause gate and administration
    test_batch         all-or-nothing batch registration
    test_events        event shapes, ordering, sinks, logging
    test_concurrency   linearizability under parallel callers
    test_properties    hypothesis checks of the registry invariants
"""
