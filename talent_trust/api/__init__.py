from talent_trust.api.trust import trust_router, admin_trust_router
