# Services package.
#
# Each module exposes a focused set of async functions that hold the
# business rules for one aggregate and assemble response bodies:
#
#   auth_service     - registration, login, current user, partial update
#   profile_service  - profiles and follow / unfollow
#   article_service  - article CRUD, listing, feed, favorites, tags
#   comment_service  - comments on an article
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  The acting user's id, when there is one, is
# passed explicitly by the router; services never look it up themselves.
