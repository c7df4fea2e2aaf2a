"""HTTP surface for the deposit, referral and withdrawal services."""
