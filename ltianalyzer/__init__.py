"""Control-theory analysis of linear time-invariant SISO plants."""
from .algebra import (
    align_numerator,
    complex_add,
    complex_divide,
    complex_magnitude,
    complex_multiply,
    complex_phase,
    complex_power,
    complex_subtract,
    evaluate_polynomial,
    format_polynomial,
    trim_leading_zeros,
)
from .characteristics import ResponseCharacteristics, response_characteristics
from .frequency import (
    FrequencyPoint,
    FrequencyResponse,
    StabilityMargins,
    create_frequency_array,
    find_corner_frequencies,
    frequency_response,
    low_frequency_phase,
    stability_margins,
)
from .plant import (
    ZPK,
    FirstOrderPlant,
    HigherOrderPlant,
    Plant,
    PlantType,
    SecondOrderPlant,
    first_order_polynomials,
    higher_order_polynomials,
    second_order_polynomials,
)
from .root_locus import GainSample, RootLocus, plant_root_locus, root_locus, track_branches
from .roots import durand_kerner, solve_roots
from .stability import (
    HurwitzResult,
    RouthResult,
    StabilitySummary,
    count_sign_changes,
    hurwitz_criterion,
    hurwitz_matrix,
    principal_minors,
    routh_array,
    routh_criterion,
    stability_summary,
)
from .time_response import (
    INPUT_TYPES,
    create_time_array,
    damping_regime,
    simulate_state_space,
    state_space_realization,
    time_response,
)

__version__ = '0.1.0'
