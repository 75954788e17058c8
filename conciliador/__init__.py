"""Questor x Sênior x Gestta client-base reconciliation."""
