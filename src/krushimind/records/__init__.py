"""Records bounded context.

Creates and reads the user-generated records kept on the device, pairing
each syncable record with a sync queue entry.
"""
