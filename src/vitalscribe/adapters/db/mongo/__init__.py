"""
MongoDB (Motor + Beanie) implementation of the persistent store collaborator.
"""
