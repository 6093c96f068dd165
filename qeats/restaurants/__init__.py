"""
Restaurant lookup engine.

Responsibilities:
- Decide a serving radius from the time of day.
- Find restaurants that are open and within the serving radius of a user.
- Serve the "everything nearby" query through a geohash-keyed cache.
- Fan a search term out across name, attribute, item-name and item-attribute
  matches and merge the results.
"""
