"""
3S Li-ion voltage discharge curve for hosts without a fuel gauge.
"""

# Voltage -> percent. More data points in the flat middle region for better accuracy
DISCHARGE_CURVE = [
    (12.60, 100),
    (12.50, 95),
    (12.40, 90),
    (12.30, 85),
    (12.20, 80),
    (12.00, 75),
    (11.90, 70),
    (11.80, 65),
    (11.70, 60),
    (11.60, 55),
    (11.50, 50),
    (11.40, 45),
    (11.30, 40),
    (11.20, 35),
    (11.10, 30),
    (11.00, 25),
    (10.80, 20),
    (10.60, 15),
    (10.40, 10),
    (10.20, 7),
    (10.00, 5),
    (9.80, 3),
    (9.60, 2),
    (9.40, 1),
    (9.00, 0),
]

VOLT_MIN = DISCHARGE_CURVE[-1][0]
VOLT_MAX = DISCHARGE_CURVE[0][0]


def voltage_to_percent(voltage: float) -> float:
    """Convert pack voltage to a state-of-charge percentage."""
    if voltage >= VOLT_MAX:
        return 100.0
    if voltage <= VOLT_MIN:
        return 0.0

    for (v_high, p_high), (v_low, p_low) in zip(DISCHARGE_CURVE, DISCHARGE_CURVE[1:]):
        if v_low <= voltage <= v_high:
            ratio = (voltage - v_low) / (v_high - v_low)
            return p_low + ratio * (p_high - p_low)
    return 0.0
