# Mock Payment Gateway
