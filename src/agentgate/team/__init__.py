"""Formation registry: teammates, ownership claims and tool-policy layers."""
