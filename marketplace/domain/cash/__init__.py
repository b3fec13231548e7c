"""Cash domain - Cash settings, pricing and provider commission debt"""
