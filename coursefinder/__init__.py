"""
coursefinder – resolve natural-language course requests against a session catalogue.
"""
