# Repositories package.
#
# Thin persistence accessors, one module per table family:
#
#   user_repository      - users (lookup by id / email / username)
#   article_repository   - articles, listing filters and feed
#   comment_repository   - comments on an article
#   tag_repository       - tag rows and the public tag list
#   follow_repository    - follower -> followee pairs
#   favorite_repository  - user -> article favorites and counts
#
# Functions take an AsyncSession first, flush but never commit, and signal
# absence or uniqueness violations with the domain errors in conduit.errors.
