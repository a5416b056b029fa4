from django import forms

from .models import MAX_LINE_QUANTITY


class AddToCartForm(forms.Form):
    productId = forms.IntegerField(min_value=1)
    quantity = forms.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY, required=False, initial=1)


class UpdateCartForm(forms.Form):
    # Zero or negative removes the line.
    quantity = forms.IntegerField(max_value=MAX_LINE_QUANTITY)
