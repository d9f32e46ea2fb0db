"""Binary decoding: cursor, value decoder and block codecs."""
