"""Growth propagation model.

Production, consumption and savings are seeded in the first period and
grown forward by per-period multipliers.  Net wealth is derived for every
period.
"""

from __future__ import annotations

from modelhost.models.base import Bound, Model
from modelhost.models.registry import register_model


@register_model("Model2")
class Model2(Model):
    bound = (
        Bound("LL", Bound.INT, doc="number of years"),
        Bound("growthRatesProduction", doc="growth rate of production"),
        Bound("growthRatesConsumption", doc="growth rate of consumption"),
        Bound("growthRatesSavings", doc="growth rate of savings"),
        Bound("production"),
        Bound("consumption"),
        Bound("savings"),
        Bound("netWealth"),
    )

    def __init__(self) -> None:
        super().__init__()
        self.temp = 0.0  # working value, not part of the data model

    def run(self) -> None:
        self.netWealth = [0.0] * self.LL
        self.netWealth[0] = self.production[0] - self.consumption[0] + self.savings[0]

        for t in range(1, self.LL):
            self.production[t] = self.growthRatesProduction[t] * self.production[t - 1]
            self.consumption[t] = self.growthRatesConsumption[t] * self.consumption[t - 1]
            self.savings[t] = self.growthRatesSavings[t] * self.savings[t - 1]
            self.netWealth[t] = self.production[t] - self.consumption[t] + self.savings[t]
