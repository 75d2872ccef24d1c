"""Idea Factory: daily generation, validation and ranking of product ideas"""
