# Services package.
#
#   filters       pure helpers: slugify, list filter builder, month cut-off
#   post_service  create / list / update / delete / view for Post
#
# Service functions take an AsyncSession as their first argument so that
# the router layer controls the transaction boundary via ``get_db``.
