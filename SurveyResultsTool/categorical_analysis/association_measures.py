"""
Association measures for survey contingency tables.

This module tests two categorical answers for independence and measures the
strength of their association with Cramer's V, the phi coefficient and the
contingency coefficient.
"""

import logging
import numpy as np
import pandas as pd
from typing import Dict, Optional
from scipy import stats


class AssociationMeasures:
    """
    Calculate association measures for cross-tabulated answers.

    Features:
    - Pearson chi-square test of independence
    - Cramer's V for general association
    - Phi coefficient for 2x2 tables
    - Contingency coefficient
    """

    def __init__(self):
        """Initialize AssociationMeasures calculator."""
        self.logger = logging.getLogger(__name__)

    def calculate_measures(self, contingency_table: pd.DataFrame) -> Dict[str, float]:
        """
        Calculate the chi-square test and association measures.

        Parameters
        ----------
        contingency_table : pd.DataFrame
            Observed counts, without margins

        Returns
        -------
        dict
            ``chi_square``, ``p_value``, ``degrees_of_freedom``,
            ``cramers_v``, ``contingency_coefficient`` and, for 2x2 tables,
            ``phi``. Empty when the test cannot be computed.
        """
        measures = {}

        try:
            chi_square, p_value, dof, _ = stats.chi2_contingency(
                contingency_table.values, correction=False
            )
            n = contingency_table.values.sum()
            rows, cols = contingency_table.shape

            measures['chi_square'] = float(chi_square)
            measures['p_value'] = float(p_value)
            measures['degrees_of_freedom'] = int(dof)
            measures['cramers_v'] = self.cramers_v(contingency_table, chi_square)
            measures['contingency_coefficient'] = self.contingency_coefficient(chi_square, n)

            if rows == 2 and cols == 2:
                measures['phi'] = self.phi_coefficient(contingency_table)

        except Exception as e:
            self.logger.warning(f"Error calculating association measures: {e}")

        return measures

    def cramers_v(self,
                  contingency_table: pd.DataFrame,
                  chi_square_statistic: Optional[float] = None) -> float:
        """
        Calculate Cramer's V.

        Cramer's V = sqrt(chi_square / (n * min(rows-1, cols-1)))
        """
        try:
            n = contingency_table.values.sum()
            rows, cols = contingency_table.shape

            if chi_square_statistic is None:
                chi_square_statistic, _, _, _ = stats.chi2_contingency(
                    contingency_table.values, correction=False
                )

            min_dim = min(rows - 1, cols - 1)
            if min_dim == 0 or n == 0:
                return 0.0

            return float(np.sqrt(chi_square_statistic / (n * min_dim)))

        except Exception as e:
            self.logger.warning(f"Error calculating Cramer's V: {e}")
            return 0.0

    def phi_coefficient(self, contingency_table: pd.DataFrame) -> float:
        """
        Calculate phi coefficient for 2x2 tables.

        phi = (ad - bc) / sqrt((a+b)(c+d)(a+c)(b+d))
        """
        if contingency_table.shape != (2, 2):
            raise ValueError("Phi coefficient requires 2x2 table")

        a, b, c, d = contingency_table.values.flatten().astype(float)

        denominator = np.sqrt((a + b) * (c + d) * (a + c) * (b + d))
        if denominator == 0:
            return 0.0

        return float((a * d - b * c) / denominator)

    def contingency_coefficient(self, chi_square_statistic: float, n: int) -> float:
        """
        Calculate contingency coefficient.

        C = sqrt(chi_square / (chi_square + n))
        """
        if n == 0:
            return 0.0
        return float(np.sqrt(chi_square_statistic / (chi_square_statistic + n)))
