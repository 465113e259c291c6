"""
Prompt service.

Builds the two free-text prompts sent to the estimator: the per-company demand
judgement and the once-per-round newsroom articles. Both end with strict JSON
output instructions that the parsers in services/estimator.py rely on.
"""
import json
from typing import TYPE_CHECKING

from services.marketing_data import MarketingStats

if TYPE_CHECKING:
    from services.estimator import DemandContext, RoundNewsContext


NEWS_ARTICLE_COUNT = 4

REGION_CLUSTERS = """\
1. Western Europe Core (Germany, Netherlands, Belgium, France, Austria, Ireland)
2. Nordic Countries (Denmark, Norway, Sweden, Finland, Iceland)
3. Anglosphere (United Kingdom, USA, Canada, Australia, New Zealand)
4. Southern Europe (Italy, Spain, Portugal, Greece, Turkey)
5. Eastern Europe (Estonia, Latvia, Lithuania, Poland, Hungary, Serbia, Bosnia, Kosovo, Czechia, Slovenia, Slovakia)
6. Global High-Income Hubs (Switzerland, Hong Kong, UAE, Monaco, Singapore, Liechtenstein)
7. Advanced East Asia (Japan, South Korea, Taiwan)
8. China
9. South & Southeast Asia (India, Indonesia, Vietnam, Malaysia, Bangladesh, Philippines, Thailand)
10. Middle East & North Africa (Saudi Arabia, Qatar, Israel, Egypt, Morocco)
11. Latin America (Brazil, Mexico, Chile, Argentina, Colombia, Peru)"""

# Columns follow the cluster order above.
TABLE_A_CONSUMPTION = """\
Final consumption expenditure per capita and year;22087;27461;29985;15137;9439;31635;17755;5102;3034;5398;6814
... under 30 years old;20320;25264;21979;13926;8683;26146;14675;4217;2508;4461;5631
... 30-44 years old;21999;27351;32684;15076;9401;32995;18518;5321;3164;5630;7107
... 45-59 years old;22529;28010;35682;15440;9628;34957;19619;5638;3353;5965;7529
... over 60 years old;22308;27736;25787;15288;9533;29579;16601;4770;2837;5047;6371
% spending: housing;25.1;26.9;23.6;21.3;22.4;23.5;23.8;22.2;23.5;20.1;15.1
% spending: food and non-alcoholic beverages;11.2;12.0;7.2;14.9;15.3;9.2;16.1;25.0;15.5;21.9;23.1
% spending: alcoholic beverages, tobacco;3.6;3.8;3.9;4.0;6.5;6.4;2.5;4.8;1.7;1.8;2.9
% spending: clothing and footwear;4.4;4.1;3.8;6.1;4.7;3.4;3.5;5.4;2.7;5.9;3.5
% spending: furnishing and household equipment;5.9;5.8;4.8;5.8;5.6;5.0;4.5;5.5;4.7;6.0;5.0
% spending: health;4.6;3.3;7.5;3.8;4.3;10.8;4.4;9.0;2.6;2.6;6.6
% spending: transport;11.8;12.6;11.4;13.3;12.9;12.4;9.3;10.6;11.0;12.2;13.2
% spending: communications;2.2;2.2;1.9;2.4;2.2;1.8;3.5;3.5;6.2;3.6;2.6
% spending: recreation and culture;8.7;10.9;9.1;6.2;6.9;6.5;8.3;8.8;3.2;5.0;6.5
% spending: education;0.8;0.5;2.0;1.3;0.9;0.9;1.8;2.5;1.4;2.0;2.8
% spending: restaurants and hotels;9.7;6.9;7.9;12.5;7.9;7.6;6.4;0.0;17.0;9.1;7.9
% spending: miscellaneous goods;12.0;11.1;16.9;7.7;10.4;12.5;15.9;2.7;10.3;9.8;10.8
population;198487707;27850606;482039649;214835650;84738595;59294157;198897012;1419320000;2224000000;202600000;517565461
% buying online at least once a year;87;90;84.3;64;48;87;76;41.5;20;85;75
online share of retail revenue;13.4;12;16;16;16;14.6;20;28.2;10;29;15
share under 25;27.6;27.6;29.7;23.3;25.5;25.4;20.4;27.5;40.9;40.7;36.2
share 25-64;52.3;51.4;52.3;53.5;53.9;57.2;55.3;57.8;51.9;51.7;52.5
share over 64;20.1;21;18;23.2;20.6;17.4;24.3;14.7;7.2;7.6;8.7"""

TABLE_B_BEHAVIOUR = """\
Question;Gen Z;Gen Y;Gen X;Boomer
Always open to discover new brands;71%;81%;15%;25%
Actively seeking new brands at least weekly;57%;;;
Brands lie;56%;47%;;
Trust brand claims about their product;40%;58%;;
Social media influencers create new trends;51%;36%;;
Rely on algorithms to discover new things;45%;52%;;
Buying impulsively;34%;33%;;
Look for reviews from online influencers;40%;31%;;
Look for items on sale or special offers;45%;42%;;
More likely to buy from brands seen as cool;84%;;;
Willing to pay more for sustainably produced goods;61%;;;
Buying because of social media / peer reference;80%;67%;19%;40%
Prefer online shopping;80%;75%;;55%
Make buying decisions based on online reviews;;;;52%
Value regional products;;;;65%
Use TV/Radio/Newspaper daily;;;;90%"""

TABLE_C_TO_E = """\
Cool brand features (Gen Z): exclusive content 55%; sponsoring events 55%; collaborations 52%; limited drops 52%
Purchase influence (Gen X): friends/family 51%; online reviews 34%; retailers 32%; brands 26%; traditional ads 18%
Purchase discouragers (Gen Z;Gen Y): disruptive ad 41%;32%; unknown brand 27%;26%; no independent reviews 46%;35%"""


def _sanitize_strategy(strategy) -> str:
    return json.dumps(strategy or {}, ensure_ascii=False).replace('"', "'")


def build_demand_prompt(context: "DemandContext", marketing_stats: MarketingStats) -> str:
    return f"""You are an economic simulation AI for a business strategy game.

GAME GOAL CONTEXT:
- The challenge is to sell an UNNECESSARY or LOW-NEED product through smart, creative or manipulative marketing.
- Strong marketing can create demand even for pointless products; weak marketing reduces demand but rarely eliminates it.

Use ONLY the reference data below. Do NOT invent external statistics.

REGION CLUSTERS:
{REGION_CLUSTERS}

TABLE A - REGIONAL CONSUMPTION & DEMOGRAPHICS (columns follow the cluster order):
{TABLE_A_CONSUMPTION}

TABLE B - CONSUMER BEHAVIOUR:
{TABLE_B_BEHAVIOUR}

TABLES C-E:
{TABLE_C_TO_E}

ADDITIONAL MARKETING STATISTICS:
{marketing_stats.format_for_prompt()}

PRODUCT, PRODUCTION & MARKET CONTEXT
Company: {context.company_name}
Product name: {context.product_name}
Product description: {context.product_description}
Unit price: EUR {context.price_per_unit}
Units available this round: {context.units_available}
Units sold last round: {context.units_sold_last_round}
Availability: {context.scarcity.value}
Sustainability claim level: {context.sustainability_claim}
Production cost region: {context.region_cost_level}
Marketing pressure intensity (log-scaled): {context.marketing_pressure}

Marketing campaign description (sanitized):
{_sanitize_strategy(context.marketing_strategy)}

RULES:
- Penalize clearly false factual claims (illegal under EU consumer protection) heavily; emotional framing,
  urgency and aspiration are legal and may drive strong demand.
- Score the campaign quality internally from -3 to +5; this score dominates demand more than budget or price.
- If marketing visibility is medium or high, absoluteDemand MUST be greater than 0.
- absoluteDemand counts people who actually buy; use uneven, realistic numbers.
- Write one aggregated feedback paragraph focused on marketing, regions and age groups.
- Write between 8 and 15 short-to-long reactions to the marketing from different generations and countries,
  some persuaded and some resistant.

OUTPUT FORMAT (STRICT JSON, nothing else):
{{
  "absoluteDemand": number,
  "satisfactionDelta": number,
  "sustainabilityScore": number,
  "summary": string,
  "reviews": [{{"sentiment": number, "text": string}}]
}}
"""


def build_news_prompt(context: "RoundNewsContext") -> str:
    player_lines = "\n".join(
        f"- {p.name}: units sold {p.units_sold}, profit {p.profit}" for p in context.players
    )
    return f"""You are an investigative business journalist inside a satirical European economic simulation.

ROUND CONTEXT
Round: {context.round}

Players:
{player_lines}

Top seller: {context.top_seller.name} ({context.top_seller.units_sold} units)
Lowest seller: {context.lowest_seller.name} ({context.lowest_seller.units_sold} units)

You MUST write EXACTLY {NEWS_ARTICLE_COUNT} articles:
1) TOP OF THE ROUND - why the winning strategy worked, sharp and slightly mocking.
2) FLOP OF THE ROUND - the strategic failure, ironic but funny even to the losing player.
3) INVESTIGATION - how marketing engineered demand and which psychological levers were pulled. Do not moralize.
4) MEDIA CLIMATE - what this round says about attention, culture and consumer mood.

Editorial, opinionated tone. Never insult players personally. Products are symbols; strategy is the story.

OUTPUT FORMAT (STRICT JSON, nothing else):
[
  {{"title": "string", "text": "string", "type": "top | flop | investigation | trend"}}
]
"""
