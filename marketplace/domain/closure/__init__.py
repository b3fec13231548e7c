"""Closure domain - Cash appointment closure state machine"""
