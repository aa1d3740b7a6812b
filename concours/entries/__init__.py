"""
Module 'entries' (feature-first): soumission, listing, téléchargement et suppression des entrées.
"""
